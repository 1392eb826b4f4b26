"""Security utilities for the social copy service.

Provides:
- Log sanitization (remove API keys, secrets)
- Text sanitization before sending scraped content to the LLM
"""

import logging
import re

# =============================================================================
# Sensitive Data Patterns (for log sanitization)
# =============================================================================

# Patterns that might contain API keys or secrets
SENSITIVE_PATTERNS = [
    # API Keys
    (re.compile(r'(hf_[a-zA-Z0-9]{20,})'), '[HF_KEY_REDACTED]'),
    (re.compile(r'(AIza[0-9A-Za-z_\-]{30,})'), '[GOOGLE_KEY_REDACTED]'),
    (re.compile(r'(pcsk_[a-zA-Z0-9_]{20,})'), '[PINECONE_KEY_REDACTED]'),
    (re.compile(r'(api[_-]?key["\s:=]+)["\']?([a-zA-Z0-9_\-]{20,})["\']?', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(bearer\s+)([a-zA-Z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED]'),

    # JWT format
    (re.compile(r'(eyJ[a-zA-Z0-9_\-]+\.eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+)'), '[JWT_REDACTED]'),

    # Generic secrets
    (re.compile(r'(secret["\s:=]+)["\']?([^\s"\']{8,})["\']?', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(token["\s:=]+)["\']?([a-zA-Z0-9_\-]{20,})["\']?', re.IGNORECASE), r'\1[REDACTED]'),

    # Query-string keys (?key=...)
    (re.compile(r'([?&]key=)([^&\s]+)', re.IGNORECASE), r'\1[REDACTED]'),
]


def sanitize_error_message(error: Exception) -> str:
    """Sanitize error message to remove potential secrets.

    Args:
        error: The exception to sanitize

    Returns:
        Sanitized error message safe for logging
    """
    message = str(error)

    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)

    # Truncate very long messages (might contain full responses)
    if len(message) > 500:
        message = message[:500] + "... [truncated]"

    return message


def safe_log_error(logger_instance: logging.Logger, context: str, error: Exception) -> None:
    """Log an error safely without exposing sensitive data.

    Args:
        logger_instance: The logger to use
        context: Description of what operation failed
        error: The exception that occurred
    """
    safe_message = sanitize_error_message(error)
    error_type = type(error).__name__
    logger_instance.error(f"{context}: [{error_type}] {safe_message}")


# =============================================================================
# LLM input sanitization
# =============================================================================

MAX_LLM_TEXT_LENGTH = 10000


def sanitize_text_for_llm(text: str) -> str:
    """Sanitize text before sending it to the embedding or generation APIs.

    Args:
        text: Text to sanitize

    Returns:
        Sanitized text, stripped
    """
    if not text:
        return ""

    # Remove control characters except newlines and tabs
    sanitized = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    # Escape delimiters that could confuse the LLM
    sanitized = sanitized.replace("```", "'''")

    # Remove invisible unicode characters that could hide injections
    sanitized = re.sub(r'[\u200b-\u200f\u2028-\u202f\u2060-\u206f]', '', sanitized)

    if len(sanitized) > MAX_LLM_TEXT_LENGTH:
        sanitized = sanitized[:MAX_LLM_TEXT_LENGTH] + "... [truncated for length]"

    return sanitized.strip()
