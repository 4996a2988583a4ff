#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Persistence Module:
Article records and the stores that keep them. ApiArticleStore talks to the
article storage API over HTTP; MemoryArticleStore and JsonFileArticleStore
implement the same contract locally.
"""
import os
import re
import json
import logging
import unicodedata
from datetime import date, datetime
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import pydantic
import requests
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------------------------------------------------------

class StorageError(Exception):
    """The article store could not complete an operation."""


class ValidationError(StorageError):
    """The store rejected a payload."""


class SlugConflictError(ValidationError):
    """A supplied slug is already taken."""


class NotFoundError(StorageError):
    pass


# ----------------------------------------------------------------------------------------------------------------------

def _date_only(value: Any) -> Any:
    # The API serialises dates as full timestamps ("2024-01-05T00:00:00.000000Z").
    if isinstance(value, str) and 'T' in value:
        return value.split('T', 1)[0]
    if isinstance(value, datetime):
        return value.date()
    return value


def is_http_url(value: str) -> bool:
    parsed = urlparse(value or "")
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


class ArticleFields(BaseModel):
    """
    Fields shared by stored records and create payloads. On the wire the
    enhanced flag is `is_updated` and the parent link is `updated_article_id`.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, repr=False)
    author: Optional[str] = Field(default=None, max_length=255)
    published_date: Optional[date] = None
    original_url: str
    is_enhanced: bool = Field(default=False, alias='is_updated')
    parent_id: Optional[int] = Field(default=None, alias='updated_article_id')
    reference_urls: List[str] = Field(default_factory=list)

    @field_validator('published_date', mode='before')
    @classmethod
    def _strip_time(cls, value):
        return _date_only(value)

    @field_validator('reference_urls', mode='before')
    @classmethod
    def _null_references(cls, value):
        return value or []


class ArticleRecord(ArticleFields):
    id: int
    slug: str
    created_at: Optional[datetime] = None

    # Stored content may be empty; the create rules live on ArticleDraft.
    content: str = Field(default="", repr=False)


class ArticleDraft(ArticleFields):
    """Create payload. The slug is generated by the store when omitted."""
    slug: Optional[str] = None

    @field_validator('title', 'content')
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator('original_url')
    @classmethod
    def _well_formed_url(cls, value: str) -> str:
        if not is_http_url(value):
            raise ValueError(f"not a well-formed http(s) URL: {value!r}")
        return value

    @model_validator(mode='after')
    def _enhanced_iff_parent(self):
        if self.is_enhanced != (self.parent_id is not None):
            raise ValueError("is_enhanced must be set exactly when parent_id is set")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)


def build_draft(**fields) -> ArticleDraft:
    """ArticleDraft constructor that reports bad input as a store ValidationError."""
    try:
        return ArticleDraft(**fields)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e


# ----------------------------------------------------------------------------------------------------------------------

def slugify(text: str, max_length: int = 200) -> str:
    """
    Lowercase, ASCII, hyphen separated ("AI and Search (Enhanced)" ->
    "ai-and-search-enhanced"). Returns "untitled" when nothing is left.
    """
    if not text:
        return "untitled"

    text = unicodedata.normalize('NFKD', str(text)).encode('ascii', 'ignore').decode('ascii')
    text = text.lower()
    text = re.sub(r'[^a-z0-9\s_-]', '', text)
    text = re.sub(r'[\s_-]+', '-', text).strip('-')
    text = text[:max_length].strip('-')
    return text or "untitled"


def unique_slug(base: str, exists: Callable[[str], bool]) -> str:
    """First of base, base-1, base-2, ... for which `exists` is False."""
    slug = base
    counter = 1
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def newest_first(records: List[ArticleRecord]) -> List[ArticleRecord]:
    """Published date descending, then creation descending; undated records last."""
    by_creation = sorted(records,
                         key=lambda r: (r.created_at.timestamp() if r.created_at else float('-inf'), r.id),
                         reverse=True)
    dated = [r for r in by_creation if r.published_date is not None]
    undated = [r for r in by_creation if r.published_date is None]
    return sorted(dated, key=lambda r: r.published_date, reverse=True) + undated


# ----------------------------------------------------------------------------------------------------------------------

class IArticleStore(ABC):
    """
    The article storage contract: filtered listing, latest original lookup,
    CRUD by id, and slug lookup.
    """

    @abstractmethod
    def list_articles(self, is_enhanced: Optional[bool] = None) -> List[ArticleRecord]:
        """All records, optionally filtered by the enhanced flag, newest first."""
        pass

    @abstractmethod
    def latest_original(self) -> Optional[ArticleRecord]:
        pass

    @abstractmethod
    def get(self, article_id: int) -> ArticleRecord:
        """Raises NotFoundError for an unknown id."""
        pass

    @abstractmethod
    def create(self, draft: ArticleDraft) -> ArticleRecord:
        pass

    @abstractmethod
    def update(self, article_id: int, **fields) -> ArticleRecord:
        pass

    @abstractmethod
    def delete(self, article_id: int):
        pass

    @abstractmethod
    def slug_exists(self, slug: str) -> bool:
        pass


class ApiArticleStore(IArticleStore):
    """
    Client of the article storage REST API:

        GET    /articles[?is_updated=true|false]
        GET    /articles?latest=1
        GET    /articles/{id}
        POST   /articles
        PUT    /articles/{id}
        DELETE /articles/{id}
    """

    def __init__(self,
                 api_url: str,
                 session: Optional[requests.Session] = None,
                 timeout_s: int = 10):
        self.api_url = api_url.rstrip('/')
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        self.timeout = timeout_s

    def _url(self, *parts) -> str:
        return '/'.join([self.api_url, 'articles'] + [str(part) for part in parts])

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise StorageError(f"{method} {url} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {url}: not found")
        if response.status_code == 422:
            self._raise_validation(response)
        if response.status_code >= 400:
            raise StorageError(f"{method} {url}: HTTP {response.status_code} {response.text[:200]}")
        return response

    @staticmethod
    def _raise_validation(response: requests.Response):
        try:
            body = response.json()
        except ValueError:
            body = {}
        errors = body.get('errors') or {}
        message = body.get('message') or response.text[:200]
        if 'slug' in errors:
            raise SlugConflictError(f"Slug rejected: {errors['slug']}")
        raise ValidationError(f"{message} {errors}" if errors else message)

    @staticmethod
    def _records(payload) -> List[ArticleRecord]:
        if isinstance(payload, dict):
            payload = payload.get('data', [])
        return [ArticleRecord.model_validate(item) for item in payload or []]

    def list_articles(self, is_enhanced: Optional[bool] = None) -> List[ArticleRecord]:
        params = {}
        if is_enhanced is not None:
            params['is_updated'] = 'true' if is_enhanced else 'false'
        return self._records(self._request('GET', self._url(), params=params).json())

    def latest_original(self) -> Optional[ArticleRecord]:
        try:
            response = self._request('GET', self._url(), params={'latest': 1})
        except NotFoundError:
            return None
        return ArticleRecord.model_validate(response.json())

    def get(self, article_id: int) -> ArticleRecord:
        return ArticleRecord.model_validate(self._request('GET', self._url(article_id)).json())

    def create(self, draft: ArticleDraft) -> ArticleRecord:
        response = self._request('POST', self._url(), json=draft.to_payload())
        record = ArticleRecord.model_validate(response.json())
        logger.debug("Created article %s (%s)", record.id, record.slug)
        return record

    def update(self, article_id: int, **fields) -> ArticleRecord:
        payload = {}
        for name, value in fields.items():
            field = ArticleRecord.model_fields.get(name)
            key = field.alias if field is not None and field.alias else name
            payload[key] = value.isoformat() if isinstance(value, date) else value
        response = self._request('PUT', self._url(article_id), json=payload)
        return ArticleRecord.model_validate(response.json())

    def delete(self, article_id: int):
        self._request('DELETE', self._url(article_id))

    def slug_exists(self, slug: str) -> bool:
        # No lookup-by-slug endpoint; scan the listing.
        return any(record.slug == slug for record in self.list_articles())


class MemoryArticleStore(IArticleStore):
    """
    In-process store with the same validation, slug generation and ordering
    rules as the storage API.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._records: Dict[int, ArticleRecord] = {}
        self._next_id = 1
        self._clock = clock

    def _persist(self, records: Dict[int, ArticleRecord], next_id: int):
        """Hook called with the would-be state before a mutation takes effect."""
        pass

    def _commit(self, records: Dict[int, ArticleRecord], next_id: int):
        self._persist(records, next_id)
        self._records = records
        self._next_id = next_id

    def list_articles(self, is_enhanced: Optional[bool] = None) -> List[ArticleRecord]:
        records = list(self._records.values())
        if is_enhanced is not None:
            records = [r for r in records if r.is_enhanced == is_enhanced]
        return newest_first(records)

    def latest_original(self) -> Optional[ArticleRecord]:
        originals = self.list_articles(is_enhanced=False)
        return originals[0] if originals else None

    def get(self, article_id: int) -> ArticleRecord:
        try:
            return self._records[article_id]
        except KeyError:
            raise NotFoundError(f"Article {article_id} not found") from None

    def slug_exists(self, slug: str) -> bool:
        return any(record.slug == slug for record in self._records.values())

    def create(self, draft: ArticleDraft) -> ArticleRecord:
        if draft.parent_id is not None and draft.parent_id not in self._records:
            raise ValidationError(f"Parent article {draft.parent_id} does not exist")

        if draft.slug:
            if self.slug_exists(draft.slug):
                raise SlugConflictError(f"Slug {draft.slug!r} is already taken")
            slug = draft.slug
        else:
            slug = unique_slug(slugify(draft.title), self.slug_exists)

        fields = draft.model_dump(exclude={'slug'})
        record = ArticleRecord(id=self._next_id, slug=slug, created_at=self._clock(), **fields)
        self._commit({**self._records, record.id: record}, self._next_id + 1)
        return record

    def update(self, article_id: int, **fields) -> ArticleRecord:
        current = self.get(article_id)
        new_slug = fields.pop('slug', None)
        if new_slug and new_slug != current.slug:
            raise ValidationError("Slugs are immutable once assigned")

        merged = current.model_dump(exclude={'id', 'slug', 'created_at'})
        merged.update(fields)
        draft = build_draft(**merged)
        if draft.parent_id is not None and (draft.parent_id == article_id or draft.parent_id not in self._records):
            raise ValidationError(f"Invalid parent article {draft.parent_id}")

        record = ArticleRecord(id=current.id, slug=current.slug, created_at=current.created_at,
                               **draft.model_dump(exclude={'slug'}))
        self._commit({**self._records, article_id: record}, self._next_id)
        return record

    def delete(self, article_id: int):
        self.get(article_id)
        remaining = {key: record for key, record in self._records.items() if key != article_id}
        self._commit(remaining, self._next_id)


class JsonFileArticleStore(MemoryArticleStore):
    """MemoryArticleStore backed by a JSON file; a mutation takes effect only once the file is written."""

    def __init__(self, path: str, clock: Callable[[], datetime] = datetime.now):
        super().__init__(clock)
        self.path = path
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read article store {self.path}: {e}") from e

        for item in data.get('articles', []):
            record = ArticleRecord.model_validate(item)
            self._records[record.id] = record
        self._next_id = max([data.get('next_id', 1)] + [record_id + 1 for record_id in self._records])

    def _persist(self, records: Dict[int, ArticleRecord], next_id: int):
        data = {
            'next_id': next_id,
            'articles': [record.model_dump(mode='json', by_alias=True) for record in records.values()],
        }
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write article store {self.path}: {e}") from e
