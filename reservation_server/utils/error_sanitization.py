# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Error message sanitization for failure responses.

Azure SDK and azure-identity errors can echo request URLs, bearer tokens
or service principal secrets. Causes are scrubbed before they leave the
process in an AnalysisFailure.
"""

import logging
import re

logger = logging.getLogger(__name__)

# Patterns for detecting sensitive information in error messages
SENSITIVE_PATTERNS = {
    "credentials": [
        r"(?i)bearer\s+[A-Za-z0-9\-._~+/]+=*",
        r"(?i)client[_-]?secret['\"]?\s*[:=]\s*['\"]?[^\s'\",]+",
        r"(?i)password['\"]?\s*[:=]\s*['\"]?[^\s'\",]+",
        r"(?i)access[_-]?token['\"]?\s*[:=]\s*['\"]?[^\s'\",]+",
        r"(?i)sig=[^\s&'\"]+",
    ],
    "connection_string": [
        r"(?i)AccountKey=[^;\s]+",
        r"(?i)SharedAccessKey=[^;\s]+",
    ],
    "email": [
        r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
    ],
    "file_path": [
        r"/(?:home|root|var|etc|opt|srv|usr|tmp)/[\w\-./]+",
    ],
}

# Compile patterns for performance
COMPILED_PATTERNS = {
    category: [re.compile(pattern) for pattern in patterns]
    for category, patterns in SENSITIVE_PATTERNS.items()
}

MAX_MESSAGE_LENGTH = 500


def detect_sensitive_info(text: str) -> list[str]:
    """
    Detect categories of sensitive information in text.

    Args:
        text: Text to scan

    Returns:
        Sorted list of categories found
    """
    if not text:
        return []

    return sorted(
        category
        for category, patterns in COMPILED_PATTERNS.items()
        if any(pattern.search(text) for pattern in patterns)
    )


def redact_sensitive_info(text: str, replacement: str = "[REDACTED]") -> str:
    """
    Redact sensitive information from text.

    Args:
        text: Text to redact
        replacement: String to use for redacted content

    Returns:
        Text with sensitive information redacted
    """
    if not text:
        return text

    result = text
    for patterns in COMPILED_PATTERNS.values():
        for pattern in patterns:
            result = pattern.sub(replacement, result)
    return result


def sanitize_cause(exc: BaseException) -> str:
    """
    Describe the root cause of an exception without leaking secrets.

    Follows the ``__cause__`` chain to the original SDK error, prefixes it
    with its type name, redacts sensitive values and truncates long
    messages.
    """
    root = exc
    while root.__cause__ is not None:
        root = root.__cause__

    message = f"{type(root).__name__}: {root}"
    categories = detect_sensitive_info(message)
    if categories:
        logger.warning(f"Sensitive information redacted from error cause: {categories}")

    safe_message = redact_sensitive_info(message)
    if len(safe_message) > MAX_MESSAGE_LENGTH:
        safe_message = safe_message[:MAX_MESSAGE_LENGTH] + "..."
    return safe_message
