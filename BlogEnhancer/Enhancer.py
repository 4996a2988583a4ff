#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Enhancer Module:
Rewrites an article with a language model, using competing articles as
style references. Also home of the enhancement-stage error hierarchy.
"""
import logging
from typing import Optional, Sequence

import openai
from openai import OpenAI


logger = logging.getLogger(__name__)


class EnhancementError(Exception):
    """Aborts the enhancement of one article; the run moves on to the next."""


class CompletionError(EnhancementError):
    """The language model call failed or returned nothing."""


SYSTEM_PROMPT = "You are an expert content writer who improves articles to match top-ranking content on Google."

PROMPT_TEMPLATE = """You are an expert content writer. Your task is to update and improve an article to match the style, formatting, and quality of top-ranking articles on Google.

Original Article:
Title: {title}
Content: {content}

Reference Articles (top-ranking articles on Google):
{references}

Please update the original article to:
1. Match the writing style and tone of the reference articles
2. Improve the formatting and structure
3. Enhance the content quality while keeping the core message
4. Make it more engaging and professional
5. Ensure proper paragraph breaks and readability

Return ONLY the updated article content, without any additional commentary or explanation."""


def build_prompt(original, references: Sequence) -> str:
    """
    Fills the prompt template.

    Args:
        original: Anything with `title` and `content` (an ArticleRecord).
        references: ReferenceArticles, in search rank order.
    """
    reference_texts = '\n\n---\n\n'.join(
        f"Title: {reference.title}\nContent: {reference.content}" for reference in references
    )
    return PROMPT_TEMPLATE.format(title=original.title, content=original.content, references=reference_texts)


class OpenAIEnhancer:
    def __init__(self,
                 api_key: str,
                 model: str = "gpt-3.5-turbo",
                 max_tokens: int = 2000,
                 temperature: float = 0.7,
                 client: Optional[OpenAI] = None):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or OpenAI(api_key=api_key)

    def enhance(self, original, references: Sequence) -> str:
        """
        Returns the rewritten article body.

        Raises:
            CompletionError: On any API error or an empty completion.
        """
        logger.info("Calling %s to enhance %r", self.model, original.title)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(original, references)},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise CompletionError(f"Language model call failed: {e}") from e

        choices = response.choices or []
        content = (choices[0].message.content or "").strip() if choices else ""
        if not content:
            raise CompletionError("Language model returned an empty completion")
        return content
