"""
Supabase storage backends for IdeaVault.

Implements IdeaStore on the PostgREST data API and ImageStore on the Storage
API, both over plain HTTP with requests.

PostgREST documentation: https://postgrest.org/en/stable/references/api.html

=============================================================================
SUPABASE SCHEMA
=============================================================================

Table "ideas" (name configurable via SUPABASE_IDEAS_TABLE):

| Column      | Type        | Description                               |
|-------------|-------------|-------------------------------------------|
| id          | uuid        | Primary key, default gen_random_uuid()    |
| user_id     | uuid        | Owner, references auth.users              |
| text        | text        | Idea text, not null                       |
| tags        | text[]      | Tags, default '{}'                        |
| mood        | text        | happy / playful / dreamy / wild           |
| favorite    | boolean     | Default false                             |
| status      | text        | open / completed / discarded, default open|
| image_url   | text        | Public URL of the attached image, nullable|
| created_at  | timestamptz | Default now()                             |
| updated_at  | timestamptz | Default now(), stamped on every update    |

Row level security should restrict every policy to user_id = auth.uid();
the owner filters sent below keep the scope even without it.

Bucket "idea-images" (SUPABASE_IMAGE_BUCKET) must be public.

=============================================================================
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from werkzeug.utils import secure_filename

from ideavault.config import (
    REQUEST_TIMEOUT,
    SUPABASE_ANON_KEY,
    SUPABASE_IDEAS_TABLE,
    SUPABASE_IMAGE_BUCKET,
    SUPABASE_URL,
)
from ideavault.errors import (
    NotFound,
    StorageError,
    StoreUnavailable,
    Unauthenticated,
    ValidationError,
)
from ideavault.models.idea import Idea, IdeaDraft, validate_changes
from ideavault.storage.base import IdeaQuery, IdeaStore, ImageStore

logger = logging.getLogger(__name__)


class _SupabaseClient:
    """Shared connection settings for the Supabase HTTP APIs."""

    def __init__(
        self,
        url: str = None,
        api_key: str = None,
        access_token: str = None,
    ):
        """
        Args:
            url: Project URL. Defaults to config.SUPABASE_URL.
            api_key: Anon key. Defaults to config.SUPABASE_ANON_KEY.
            access_token: The signed-in user's JWT. Without it requests run
                with the anon key only.
        """
        # Use provided values, or fall back to config if None (not empty string)
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SUPABASE_ANON_KEY
        self.access_token = access_token

    @property
    def _headers(self) -> Dict[str, str]:
        """Construct headers for API requests."""
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }

    def _validate_config(self) -> None:
        """Validate that required configuration is present."""
        if not self.url:
            raise StoreUnavailable("SUPABASE_URL is not configured")
        if not self.api_key:
            raise StoreUnavailable("SUPABASE_ANON_KEY is not configured")


def _error_detail(response: requests.Response) -> str:
    """Best-effort error message from a PostgREST/Storage error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason or ""
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body.get("msg") or body)
    return str(body)


class SupabaseIdeaStore(_SupabaseClient, IdeaStore):
    """
    Idea rows in a Supabase table, accessed through PostgREST.

    Every request carries an owner filter (user_id=eq.<owner>), so rows of
    other users are never read or written.
    """

    def __init__(
        self,
        url: str = None,
        api_key: str = None,
        access_token: str = None,
        table_name: str = None,
    ):
        super().__init__(url=url, api_key=api_key, access_token=access_token)
        self.table_name = table_name if table_name is not None else SUPABASE_IDEAS_TABLE

    @property
    def name(self) -> str:
        return "supabase"

    @property
    def _base_url(self) -> str:
        """Construct the base URL for table requests."""
        return f"{self.url}/rest/v1/{self.table_name}"

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _request(self, method: str, params: Dict[str, str], json: Any = None,
                 prefer: str = None) -> requests.Response:
        """
        Send a request and map failures to IdeaVault errors.

        Raises:
            StoreUnavailable: Network failure, timeout or 5xx.
            Unauthenticated: 401/403.
            ValidationError: Any other 4xx.
        """
        self._validate_config()

        headers = self._headers
        if json is not None:
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = prefer

        try:
            response = requests.request(
                method,
                self._base_url,
                headers=headers,
                params=params,
                json=json,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning("Supabase %s %s failed: %s", method, self.table_name, e)
            raise StoreUnavailable(f"Data store unreachable: {e}") from e

        if response.status_code >= 500:
            raise StoreUnavailable(
                f"Data store error {response.status_code}: {_error_detail(response)}"
            )
        if response.status_code in (401, 403):
            raise Unauthenticated(f"Data store rejected credentials: {_error_detail(response)}")
        if response.status_code >= 400:
            raise ValidationError(f"Data store rejected request: {_error_detail(response)}")

        return response

    @staticmethod
    def _rows(response: requests.Response) -> List[Dict[str, Any]]:
        """Decode a JSON array body, treating an empty body as no rows."""
        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as e:
            raise StoreUnavailable("Data store returned invalid JSON") from e
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _query_params(query: Optional[IdeaQuery]) -> Dict[str, str]:
        """Translate IdeaQuery filters to PostgREST operators."""
        params: Dict[str, str] = {}
        if query is None or query.is_empty:
            return params

        if query.mood is not None:
            params["mood"] = f"eq.{query.mood.value}"
        if query.favorite_only:
            params["favorite"] = "eq.true"
        if query.status is not None:
            params["status"] = f"eq.{query.status.value}"
        if query.tags:
            tags = ",".join(f'"{t}"' for t in query.tags)
            params["tags"] = f"ov.{{{tags}}}"

        return params

    # =========================================================================
    # IdeaStore interface
    # =========================================================================

    def list_ideas(self, owner_id: str, query: Optional[IdeaQuery] = None) -> List[Idea]:
        params = {
            "select": "*",
            "user_id": f"eq.{owner_id}",
            "order": "created_at.desc",
        }
        params.update(self._query_params(query))

        response = self._request("GET", params)

        ideas = []
        for row in self._rows(response):
            idea = Idea.from_row(row)
            if idea is None:
                logger.warning("Skipping malformed idea row: %r", row.get("id") if isinstance(row, dict) else row)
                continue
            # Rows of another owner can only show up if RLS and filters disagree
            if idea.owner_id != owner_id:
                continue
            ideas.append(idea)

        return ideas

    def create_idea(self, draft: IdeaDraft) -> Idea:
        draft.validate()

        response = self._request(
            "POST",
            params={"select": "*"},
            json=draft.to_row(),
            prefer="return=representation",
        )

        rows = self._rows(response)
        idea = Idea.from_row(rows[0]) if rows else None
        if idea is None:
            raise StoreUnavailable("Data store did not return the created idea")

        logger.info("Created idea %s for %s", idea.id, draft.owner_id)
        return idea

    def update_idea(self, owner_id: str, idea_id: str, changes: Dict[str, Any]) -> Idea:
        patch = validate_changes(changes)
        patch["updated_at"] = datetime.now(timezone.utc).isoformat()

        response = self._request(
            "PATCH",
            params={
                "id": f"eq.{idea_id}",
                "user_id": f"eq.{owner_id}",
                "select": "*",
            },
            json=patch,
            prefer="return=representation",
        )

        rows = self._rows(response)
        if not rows:
            raise NotFound(f"Idea {idea_id} not found")

        idea = Idea.from_row(rows[0])
        if idea is None:
            raise StoreUnavailable("Data store returned a malformed idea")

        logger.info("Updated idea %s (%s)", idea_id, ", ".join(sorted(changes)))
        return idea

    def delete_idea(self, owner_id: str, idea_id: str) -> None:
        # Delete-by-filter: matching zero rows is a success
        self._request(
            "DELETE",
            params={
                "id": f"eq.{idea_id}",
                "user_id": f"eq.{owner_id}",
            },
        )
        logger.info("Deleted idea %s", idea_id)


class SupabaseImageStore(_SupabaseClient, ImageStore):
    """
    Image objects in a public Supabase Storage bucket.

    Object names follow "idea-<epoch ms>-<filename>".
    """

    def __init__(
        self,
        url: str = None,
        api_key: str = None,
        access_token: str = None,
        bucket: str = None,
    ):
        super().__init__(url=url, api_key=api_key, access_token=access_token)
        self.bucket = bucket if bucket is not None else SUPABASE_IMAGE_BUCKET

    @property
    def name(self) -> str:
        return "supabase-storage"

    @property
    def _public_prefix(self) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/"

    def _object_url(self, object_name: str) -> str:
        return f"{self.url}/storage/v1/object/{self.bucket}/{quote(object_name)}"

    def public_url(self, object_name: str) -> str:
        """Return the public URL of an object in the bucket."""
        return self._public_prefix + quote(object_name)

    @staticmethod
    def object_name_for(filename: str) -> str:
        """Build a unique object name from a user-supplied filename."""
        safe = secure_filename(filename or "") or "image"
        return f"idea-{int(time.time() * 1000)}-{safe}"

    def upload_image(self, data: bytes, filename: str, content_type: str = "application/octet-stream") -> str:
        try:
            self._validate_config()
        except StoreUnavailable as e:
            raise StorageError(str(e)) from e

        object_name = self.object_name_for(filename)
        headers = self._headers
        headers["Content-Type"] = content_type
        headers["x-upsert"] = "false"

        try:
            response = requests.post(
                self._object_url(object_name),
                headers=headers,
                data=data,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StorageError(f"Image upload failed: {e}") from e

        if response.status_code >= 400:
            raise StorageError(
                f"Image upload failed ({response.status_code}): {_error_detail(response)}"
            )

        logger.info("Uploaded image %s (%d bytes)", object_name, len(data))
        return self.public_url(object_name)

    def delete_image(self, url: str) -> None:
        if not url.startswith(self._public_prefix):
            raise StorageError(f"Not an object of bucket {self.bucket}: {url}")

        object_name = url[len(self._public_prefix):]

        try:
            response = requests.delete(
                f"{self.url}/storage/v1/object/{self.bucket}/{object_name}",
                headers=self._headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StorageError(f"Image removal failed: {e}") from e

        if response.status_code >= 400 and response.status_code != 404:
            raise StorageError(
                f"Image removal failed ({response.status_code}): {_error_detail(response)}"
            )

        logger.info("Removed image %s", object_name)
