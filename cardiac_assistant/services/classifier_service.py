"""
Keyword-based query classifier.
Maps a patient message to a routing category without any remote call.
"""

from cardiac_assistant.models.domain import Category, ClassificationResult

# Iteration order doubles as tie-break priority
CATEGORY_KEYWORDS: dict[Category, tuple[str, ...]] = {
    Category.EXERCISE: (
        "exercise", "activity", "physical", "walk", "run",
        "gym", "workout", "cardio", "rehab",
    ),
    Category.DIET: (
        "diet", "food", "eat", "nutrition", "salt", "sodium", "weight", "meal",
    ),
    Category.MEDICATION: (
        "medication", "drug", "pill", "medicine", "dose", "prescription",
        "beta blocker", "ace inhibitor",
    ),
    Category.NURSING: (
        "pain", "symptom", "chest", "shortness", "breath", "fatigue",
        "swelling", "heart rate",
    ),
}


class QueryClassifier:
    """
    Scores a message against fixed keyword sets.
    Stateless; the same message always yields the same result.
    """

    def __init__(
        self, keywords: dict[Category, tuple[str, ...]] | None = None
    ):
        self.keywords = keywords or CATEGORY_KEYWORDS

    def classify(self, message: str) -> ClassificationResult:
        """
        Classifies a message by keyword density.

        Score per category is matched keywords / keyword set size
        (case-insensitive substring match). The first category with the
        strictly highest score wins.

        Args:
            message: Patient message

        Returns:
            ClassificationResult; general with confidence 0 if nothing matched
        """
        text = message.lower()

        best_category = Category.GENERAL
        best_score = 0.0
        best_matches: frozenset[str] = frozenset()

        for category, keywords in self.keywords.items():
            matches = frozenset(kw for kw in keywords if kw in text)
            score = len(matches) / len(keywords)
            if score > best_score:
                best_category, best_score, best_matches = category, score, matches

        return ClassificationResult(
            category=best_category,
            confidence=best_score,
            matched_keywords=best_matches,
        )
