"""
Services Package

Exports all services for easy importing.
"""

from academy.services.errors import AuthError, StoreError, DocumentExists, DocumentNotFound
from academy.services.ports import Identity, DocumentSnapshot, CollectionSnapshot
from academy.services.auth import IdentityToolkitAuth, LocalAuth
from academy.services.identity import IdentityBootstrap
from academy.services.store_sql import SqlDocumentStore
from academy.services.sync import SiteSync, config_path, inquiries_path
from academy.services.site import SiteApplication, IdentityUnavailable

__all__ = [
    'AuthError',
    'StoreError',
    'DocumentExists',
    'DocumentNotFound',
    'Identity',
    'DocumentSnapshot',
    'CollectionSnapshot',
    'IdentityToolkitAuth',
    'LocalAuth',
    'IdentityBootstrap',
    'SqlDocumentStore',
    'SiteSync',
    'config_path',
    'inquiries_path',
    'SiteApplication',
    'IdentityUnavailable',
]
