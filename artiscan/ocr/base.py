"""
Field Recognizer Base Interface

Abstract base class defining the text recognition contract.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from PIL import Image

from .result import RecognitionResult


class FieldRecognizer(ABC):
    """
    Abstract base class for field recognizers.

    A recognizer turns one cropped single-line field image into text and a
    confidence score. It never thresholds on confidence; that is a caller
    policy.
    """

    @abstractmethod
    def recognize(self, image: Image.Image) -> RecognitionResult:
        """
        Recognize the text in a field image.

        Args:
            image: PIL Image of a single-line field crop

        Returns:
            RecognitionResult with decoded text and confidence in [0, 1]
        """
        pass

    def recognize_batch(self, images: Sequence[Image.Image]) -> List[RecognitionResult]:
        """
        Recognize several independent field images.

        Default implementation calls recognize() per image. Engines that can
        run several inputs at once override this.
        """
        return [self.recognize(image) for image in images]

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Engine identifier.

        Returns:
            String name identifying this engine type (e.g., "transformer")
        """
        pass

    def configure(self, **kwargs) -> None:
        """
        Configure engine parameters.

        Override in subclasses to support runtime configuration.
        Default implementation does nothing.

        Args:
            **kwargs: Engine-specific configuration options
        """
        pass
