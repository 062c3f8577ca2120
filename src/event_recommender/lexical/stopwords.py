"""
Stopword list for lexical keyphrase extraction.

Event descriptions are mostly Japanese with English technical terms, so the list
covers Japanese event boilerplate (logistics, registration, generic learning
vocabulary) and English function words. Tokens in this set act as phrase
boundaries in the co-occurrence graph.
"""

STOPLIST_VERSION = "stopwords-ja-en-2025.1"

STOPWORDS_JA = frozenset(
    {
        # Logistics and registration
        "開催",
        "開催日",
        "日時",
        "会場",
        "場所",
        "参加",
        "参加者",
        "参加費",
        "無料",
        "有料",
        "申込",
        "申し込み",
        "申込み",
        "受付",
        "定員",
        "締切",
        "予定",
        "当日",
        "詳細",
        "案内",
        "注意",
        "注意事項",
        "連絡",
        "連絡先",
        "問い合わせ",
        "お問い合わせ",
        "お知らせ",
        "タイムテーブル",
        "スケジュール",
        "オンライン",
        "オフライン",
        "アクセス",
        "会社",
        "株式会社",
        "主催",
        "共催",
        "協賛",
        # Generic learning vocabulary
        "学習",
        "勉強",
        "内容",
        "対象",
        "対象者",
        "方法",
        "紹介",
        "説明",
        "今回",
        "皆様",
        "皆さん",
        "みなさん",
        "自分",
        "以上",
        "以下",
        "必要",
        "可能",
        "場合",
        "程度",
        "時間",
        "資料",
        "事前",
    }
)

STOPWORDS_EN = frozenset(
    {
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "by",
        "for",
        "from",
        "has",
        "have",
        "in",
        "is",
        "it",
        "its",
        "of",
        "on",
        "or",
        "that",
        "the",
        "this",
        "to",
        "was",
        "we",
        "were",
        "will",
        "with",
        "you",
        "your",
        "http",
        "https",
        "www",
        "com",
        "event",
        "events",
        "online",
        "zoom",
    }
)

STOPWORDS = STOPWORDS_JA | STOPWORDS_EN
