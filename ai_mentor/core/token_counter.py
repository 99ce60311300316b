"""
Token counting for budget accounting.

Counts tokens with tiktoken. Gemini and other models unknown to tiktoken
are counted with cl100k_base, which is close enough for the summarization
budget. Counting never raises: if an encoding cannot be loaded the count
falls back to a characters/4 estimate.

Dependencies: tiktoken
System role: Token Counter used at message write time
"""

import logging
import math
import threading

import tiktoken

logger = logging.getLogger(__name__)

FALLBACK_ENCODING = "cl100k_base"


class TokenCounter:
    """
    Deterministic (model, text) -> token count.

    Encodings are resolved once per model name and cached.
    """

    def __init__(self, fallback_encoding: str = FALLBACK_ENCODING) -> None:
        self._fallback_encoding = fallback_encoding
        self._encodings: dict[str, tiktoken.Encoding | None] = {}
        self._lock = threading.Lock()

    def count(self, model: str, text: str) -> int:
        """
        Count tokens of text as seen by model.

        Args:
            model: Model identifier the text is sent to or produced by
            text: Text to count

        Returns:
            Number of tokens, 0 for empty text
        """
        if not text:
            return 0
        encoding = self._encoding_for(model)
        if encoding is None:
            return math.ceil(len(text) / 4)
        return len(encoding.encode(text, disallowed_special=()))

    def _encoding_for(self, model: str) -> "tiktoken.Encoding | None":
        with self._lock:
            if model in self._encodings:
                return self._encodings[model]
            try:
                encoding = tiktoken.encoding_for_model(model)
            except KeyError:
                encoding = self._load_fallback(model)
            except Exception as e:
                logger.warning(
                    f"{__name__}:_encoding_for - Encoding lookup failed, using fallback",
                    extra={"model": model, "error": str(e)},
                )
                encoding = self._load_fallback(model)
            self._encodings[model] = encoding
            return encoding

    def _load_fallback(self, model: str) -> "tiktoken.Encoding | None":
        try:
            return tiktoken.get_encoding(self._fallback_encoding)
        except Exception as e:
            logger.warning(
                f"{__name__}:_load_fallback - Encoding unavailable, estimating by length",
                extra={"model": model, "encoding": self._fallback_encoding, "error": str(e)},
            )
            return None


token_counter = TokenCounter()
