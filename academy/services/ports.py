"""Ports (interfaces) for the external auth service and document store.

The site never talks to a backend directly; it only sees these small,
capability-oriented protocols and the snapshot values they deliver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class Identity:
    """An authenticated session with the auth service."""

    uid: str
    is_anonymous: bool = True
    id_token: Optional[str] = None


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time view of a single document; ``data`` is None if absent."""

    id: str
    path: str
    data: Optional[dict[str, Any]] = None

    @property
    def exists(self) -> bool:
        return self.data is not None


@dataclass(frozen=True)
class CollectionSnapshot:
    """Point-in-time view of every document in a collection."""

    path: str
    documents: list[DocumentSnapshot] = field(default_factory=list)


AuthStateCallback = Callable[[Optional[Identity]], None]
DocumentCallback = Callable[[DocumentSnapshot], None]
CollectionCallback = Callable[[CollectionSnapshot], None]
ErrorCallback = Callable[[Exception], None]


@runtime_checkable
class Subscription(Protocol):
    """Handle for a live subscription."""

    def unsubscribe(self) -> None:
        """Stop delivering snapshots."""


@runtime_checkable
class AuthService(Protocol):
    """Anonymous / custom-token authentication."""

    @property
    def current_identity(self) -> Optional[Identity]:
        """The signed-in identity, if any."""

    def sign_in_anonymously(self) -> Identity:
        """Create an anonymous session."""

    def sign_in_with_custom_token(self, token: str) -> Identity:
        """Create a session from a pre-provisioned token."""

    def sign_out(self) -> None:
        """Clear the current session."""

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register a listener for identity changes; returns an unsubscribe function."""


@runtime_checkable
class DocumentStore(Protocol):
    """Realtime document database."""

    def watch_document(
        self, path: str, on_snapshot: DocumentCallback, on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        """Deliver the document now and after every change."""

    def watch_collection(
        self, path: str, on_snapshot: CollectionCallback, on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        """Deliver the whole collection now and after every change."""

    def add_document(self, collection_path: str, data: dict[str, Any]) -> str:
        """Create a document with a store-assigned id; returns the id."""

    def create_document(self, path: str, data: dict[str, Any]) -> None:
        """Create a document at ``path``; raises DocumentExists if present."""

    def update_document(self, path: str, data: dict[str, Any]) -> None:
        """Merge ``data`` into an existing document; raises DocumentNotFound if absent."""
