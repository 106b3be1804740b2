class IdentityFilter:
    """Passes each line through unchanged."""
    def __init__(self):
        self.stage_name = "identity"

    def process(self, text: str) -> str:
        return text
