"""Prompt templates for the document capabilities."""

from __future__ import annotations

import re
from typing import Any, Dict, List

_TAG_PATTERN = re.compile(r"<[^>]*>?")

SYSTEM_PROMPT = (
    "You are a professional typesetter and editor. Reply only with the requested "
    "document content, without explanations or Markdown code fences."
)


def strip_tags(content: str) -> str:
    return _TAG_PATTERN.sub("", content)


def refine_messages(content: str, instruction: str) -> List[Dict[str, Any]]:
    prompt = (
        f'Refine the following document content based on this instruction: "{instruction}".\n'
        "Maintain the HTML structure as much as possible but improve the professional tone and flow.\n\n"
        f"CONTENT:\n{content}"
    )
    return _messages(prompt)


def restructure_messages(content: str) -> List[Dict[str, Any]]:
    prompt = (
        "Analyze the following raw text and transform it into a perfectly structured "
        "professional document using HTML tags.\n"
        "Rules:\n"
        "1. Use <h1> for the main title.\n"
        "2. Use <h2> for section headers.\n"
        "3. Use <p> for standard paragraphs.\n"
        "4. Use <ul> or <ol> for lists if appropriate.\n"
        "5. Do not include <html> or <body> tags, just the inner content.\n"
        "6. Fix common OCR or typing errors.\n"
        "7. Apply professional typesetting logic.\n\n"
        f"RAW TEXT:\n{content}"
    )
    return _messages(prompt)


def footnote_messages(content: str) -> List[Dict[str, Any]]:
    prompt = (
        "Read the following document text and suggest 3 professional footnotes or references "
        "that would make this document more authoritative.\n"
        "Return only the text for the footnotes, separated by new lines.\n\n"
        f"TEXT:\n{strip_tags(content)}"
    )
    return _messages(prompt)


def extract_text_messages(image_base64: str, mime_type: str) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {
                    "type": "text",
                    "text": (
                        "Extract the text from this image and format it into professional HTML "
                        "paragraphs. Only return the HTML content, no explanations."
                    ),
                },
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime_type};base64,{image_base64}"},
                },
            ],
        },
    ]


def _messages(prompt: str) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


__all__ = [
    "SYSTEM_PROMPT",
    "extract_text_messages",
    "footnote_messages",
    "refine_messages",
    "restructure_messages",
    "strip_tags",
]
