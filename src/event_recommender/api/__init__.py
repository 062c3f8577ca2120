# FastAPI application for keyphrase extraction and event recommendation
