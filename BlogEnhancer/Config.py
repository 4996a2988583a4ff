#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Config Module:
Site profile and pipeline settings. Defaults target the BeyondChats blog;
everything can be overridden through the environment (or a .env file).
"""
import os
from urllib.parse import urlparse
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class ConfigError(Exception):
    """Raised when a required setting is missing or invalid."""


class SiteProfile(BaseModel):
    """
    Everything the heuristics need to know about the target blog.

    The link classifier, the discoverer and the article extractor all read
    their site-specific knobs from here, so pointing the pipeline at another
    blog is a matter of building a different profile.
    """
    base_url: str = "https://beyondchats.com"
    blog_url: str = "https://beyondchats.com/blogs/"
    blog_root: str = "/blogs/"
    brand_name: str = "BeyondChats"

    # Site sections that are never articles, wherever they show up in a URL.
    excluded_paths: List[str] = Field(default_factory=lambda: [
        '/features',
        '/integrations',
        '/pricing',
        '/about',
        '/contact',
        '/case-studies',
        '/success-stories',
        '/testimonials',
        '/faq',
        '/terms',
        '/privacy',
        '/careers',
        '/team',
        '/solutions',
    ])

    # Listing sub-sections directly under the blog root (`/blogs/tag/...`, `/blogs/page/2/`).
    listing_sections: List[str] = Field(default_factory=lambda: ['tag', 'category', 'author', 'page'])

    # Anchor labels that say nothing about the article they point to.
    generic_labels: List[str] = Field(default_factory=lambda: ['read more', 'read', 'more', '→', '»'])

    # Headings that belong to the site chrome rather than to an article.
    nav_labels: List[str] = Field(default_factory=lambda: ['home', 'blog', 'about', 'contact'])

    def listing_url(self, page: int) -> str:
        """Page 1 is the blog index itself, later pages live under `page/<n>/`."""
        if page <= 1:
            return self.blog_url
        return f"{self.blog_url.rstrip('/')}/page/{page}/"


class PipelineConfig(BaseModel):
    site: SiteProfile = Field(default_factory=SiteProfile)

    # Storage
    api_url: str = "http://localhost:8000/api"
    store_file: Optional[str] = None

    # Language model
    openai_api_key: Optional[str] = Field(default=None, repr=False)
    openai_model: str = "gpt-3.5-turbo"
    max_tokens: int = 2000
    temperature: float = 0.7

    # Network
    request_timeout_s: int = 10
    render_timeout_s: int = 30
    search_settle_ms: int = 3000
    search_engine_url: str = "https://www.google.com/search"
    max_listing_pages: int = 10

    # Courtesy delays
    reference_delay_s: float = 2.0
    article_delay_s: float = 5.0

    def require_openai_key(self) -> str:
        if not self.openai_api_key:
            raise ConfigError("OPENAI_API_KEY is required for the enhancement run")
        return self.openai_api_key


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e


def load_config(dotenv_path: Optional[str] = None) -> PipelineConfig:
    """
    Build a PipelineConfig from the environment.

    Args:
        dotenv_path: Optional explicit .env file. When omitted, python-dotenv
                     searches upwards from the working directory.

    Returns:
        PipelineConfig: Defaults overridden by any environment variables set.
    """
    load_dotenv(dotenv_path)

    defaults = PipelineConfig()
    blog_url = os.environ.get("BLOG_LISTING_URL", defaults.site.blog_url)
    site = SiteProfile(
        base_url=os.environ.get("BLOG_BASE_URL", defaults.site.base_url),
        blog_url=blog_url,
        blog_root=urlparse(blog_url).path or defaults.site.blog_root,
        brand_name=os.environ.get("BLOG_BRAND_NAME", defaults.site.brand_name),
    )

    return PipelineConfig(
        site=site,
        api_url=os.environ.get("LARAVEL_API_URL", defaults.api_url),
        store_file=os.environ.get("ARTICLE_STORE_FILE") or None,
        openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
        openai_model=os.environ.get("OPENAI_MODEL", defaults.openai_model),
        max_tokens=_env_int("OPENAI_MAX_TOKENS", defaults.max_tokens),
        temperature=_env_float("OPENAI_TEMPERATURE", defaults.temperature),
        request_timeout_s=_env_int("REQUEST_TIMEOUT_S", defaults.request_timeout_s),
        render_timeout_s=_env_int("RENDER_TIMEOUT_S", defaults.render_timeout_s),
        max_listing_pages=_env_int("MAX_LISTING_PAGES", defaults.max_listing_pages),
        reference_delay_s=_env_float("REFERENCE_DELAY_S", defaults.reference_delay_s),
        article_delay_s=_env_float("ARTICLE_DELAY_S", defaults.article_delay_s),
    )
