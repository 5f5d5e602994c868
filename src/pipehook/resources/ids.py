"""Canonical logical ids for every resource the compiler creates.

An id is a readable stem built from the capitalised, alphanumeric-only
fragments, followed by the kind suffix and a digest of the exact fragment
tuple. Simplifying the fragments is lossy ("audit-log" and "auditlog" share a
stem), so the digest is what keeps ids distinct across the parameter space.
Absent fragments (no region) hash differently from empty strings.

Storage-layer resolver ids follow the model transformer's own convention and
live in :mod:`pipehook.operations`.
"""

from __future__ import annotations

import hashlib
import re
from enum import Enum

_PLACEHOLDER = re.compile(r"-?_?\$\{[^}]*\}")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")

DIGEST_LENGTH = 8


class ResourceKind(Enum):
    """Kinds of resources created by the compiler, with their id prefix/suffix."""

    ROLE = ("", "LambdaDataSourceRole")
    DATA_SOURCE = ("", "LambdaDataSource")
    HOOK_STEP = ("Invoke", "LambdaFunction")
    WRAP_STEP = ("", "Function")
    PIPELINE = ("", "PipelineResolver")

    @property
    def prefix(self) -> str:
        return self.value[0]

    @property
    def suffix(self) -> str:
        return self.value[1]


def simplify_name(value: str) -> str:
    """Strip placeholders and non-alphanumerics, then upper-case the first letter.

    >>> simplify_name("audit-log-${env}")
    'Auditlog'
    """
    cleaned = _NON_ALNUM.sub("", _PLACEHOLDER.sub("", value))
    return cleaned[:1].upper() + cleaned[1:]


def _digest(kind: ResourceKind, fragments: tuple[str | None, ...]) -> str:
    # \x1f separates fragments, \x00 marks an absent one
    material = "\x1f".join([kind.name, *("\x00" if f is None else f for f in fragments)])
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:DIGEST_LENGTH].upper()


def canonical_id(kind: ResourceKind, *fragments: str | None) -> str:
    """Build the logical id for a resource of ``kind``.

    Args:
        kind: Resource kind
        *fragments: Identity fragments; ``None`` means "not given"

    Returns:
        Alphanumeric logical id, stable for identical input
    """
    stem = "".join(simplify_name(f) for f in fragments if f)
    return f"{kind.prefix}{stem}{kind.suffix}{_digest(kind, fragments)}"


def role_id(name: str, region: str | None = None) -> str:
    return canonical_id(ResourceKind.ROLE, name, region)


def data_source_id(name: str, region: str | None = None) -> str:
    return canonical_id(ResourceKind.DATA_SOURCE, name, region)


def hook_step_id(stage: str, entity: str, hook_name: str, region: str | None = None) -> str:
    return canonical_id(ResourceKind.HOOK_STEP, stage, entity, hook_name, region)


def wrap_step_id(type_name: str, field_name: str) -> str:
    return canonical_id(ResourceKind.WRAP_STEP, type_name, field_name)


def pipeline_id(type_name: str, field_name: str) -> str:
    return canonical_id(ResourceKind.PIPELINE, type_name, field_name)


def role_name(name: str, region: str | None = None, with_env: bool = False) -> str:
    """Physical IAM role name prefix.

    The full name is joined with the API id (26 chars) and, when present, the
    environment name; IAM caps role names at 64 characters. The readable part
    is truncated, so a digest of (name, region) keeps names of distinct
    identities apart.
    """
    base = simplify_name(name) + simplify_name(region or "")
    limit = 10 if with_env else 19
    return f"{base[:limit]}{_digest(ResourceKind.ROLE, (name, region))}LambdaRole"
