from abc import ABC, abstractmethod

from src.api.schemas import ClassificationResult


class ClassifierProvider(ABC):
    """
    Abstract base class for ticket classifiers.

    This enforces a Strategy Pattern: the proxy is wired to either the remote
    model server or the local keyword stub at startup, and the route never
    knows which one it is talking to.
    """

    #: Short name reported by the health endpoint ("remote" or "local").
    strategy: str = ""

    @abstractmethod
    def classify_ticket(self, description: str) -> ClassificationResult:
        """
        Classifies a ticket description.

        Args:
            description (str): The raw text of the ticket (already validated
                as a non-empty string).

        Returns:
            ClassificationResult: The category decision with its confidence.

        Raises:
            UpstreamUnavailableError: When a remote classifier cannot answer.
                Any other exception is treated by the proxy as an internal
                error.
        """
        pass
