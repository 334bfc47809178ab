"""Storage collaborators: the contract and its in-memory / SQL implementations."""

from vaccine_kernel.storage.base import StorageCollaborator
from vaccine_kernel.storage.fixtures import FixtureSet, load_fixtures
from vaccine_kernel.storage.memory import InMemoryStorage

__all__ = [
    "FixtureSet",
    "InMemoryStorage",
    "StorageCollaborator",
    "load_fixtures",
]
