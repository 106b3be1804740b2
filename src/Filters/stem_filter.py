import snowballstemmer


class StemFilter:
    """
    Line in: trimmed text
    Line out: every word lowercased and reduced to its Snowball stem,
    joined with single spaces ("Running Quickly" -> "run quick").

    Each instance owns its stemmer; give every worker its own instance.
    """
    def __init__(self, language: str = "english"):
        self.language = language
        self.stage_name = "stem"
        self._stemmer = snowballstemmer.stemmer(language)

    def process(self, text: str) -> str:
        if text is None or not text.strip():
            return text
        words = [w.lower() for w in text.split()]
        return " ".join(self._stemmer.stemWords(words))
