"""
Template Registry - the id-keyed store of section templates.

The registry keeps exactly one template per id: the latest one registered.
Version is metadata on the template, not part of the key, so registering a
new version displaces the old one for good. Callers that need a specific
historical version must keep their own copy.

Registries are explicit objects. Construct one empty, or pre-seeded with the
built-in library, and pass it to whoever plans.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from chuk_mcp_harmony.constants import ErrorMessages, SuccessMessages
from chuk_mcp_harmony.models.template import Template, TemplateSummary
from chuk_mcp_harmony.templates.loader import (
    TemplateLoader,
    TemplateLoadError,
    builtin_library_path,
)
from chuk_mcp_harmony.templates.validator import validate_template

logger = logging.getLogger(__name__)


class TemplateNotFoundError(KeyError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(ErrorMessages.TEMPLATE_NOT_FOUND.format(template_id=template_id))

    def __str__(self) -> str:
        return str(self.args[0])


class _ReadWriteLock:
    """
    Many concurrent readers, one writer at a time.

    Waiting writers block new readers so registration can't starve.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class TemplateRegistry:
    """
    Thread-safe id -> latest Template store.

    Reads (get, ids, summaries) may run concurrently; registration is
    serialized.
    """

    def __init__(self, loader: TemplateLoader | None = None):
        """
        Initialize an empty registry.

        Args:
            loader: Loader used by load_directory (defaults to TemplateLoader())
        """
        self.loader = loader or TemplateLoader()
        self._templates: dict[str, Template] = {}
        self._lock = _ReadWriteLock()

    @classmethod
    def with_builtins(cls, library_path: Path | None = None) -> TemplateRegistry:
        """
        Create a registry pre-seeded with the built-in template library.

        Args:
            library_path: Override for the library directory

        Returns:
            A new registry
        """
        registry = cls()
        registry.load_directory(library_path or builtin_library_path())
        return registry

    def register(self, template: Template, validate: bool = True) -> Template | None:
        """
        Insert or replace the template registered under ``template.id``.

        Replacement is unconditional; the displaced template is returned and
        the displacement logged, but it is not kept.

        Args:
            template: Template to register
            validate: Reject invalid templates before touching the store

        Returns:
            The displaced template, or None if the id was new

        Raises:
            TemplateValidationError: If validate and the template is invalid
        """
        if validate:
            validate_template(template).raise_for_issues()

        with self._lock.write():
            previous = self._templates.get(template.id)
            self._templates[template.id] = template

        if previous is None:
            logger.debug(
                SuccessMessages.TEMPLATE_REGISTERED.format(
                    template_id=template.id, version=template.version
                )
            )
        else:
            logger.info(
                SuccessMessages.TEMPLATE_REPLACED.format(
                    template_id=template.id,
                    old_version=previous.version,
                    new_version=template.version,
                )
            )
        return previous

    def get(self, template_id: str) -> Template | None:
        """
        Get the template currently registered under an id.

        Args:
            template_id: Template identifier

        Returns:
            Template or None if not registered
        """
        with self._lock.read():
            return self._templates.get(template_id)

    def require(self, template_id: str) -> Template:
        """
        Get a template, failing if it is not registered.

        Raises:
            TemplateNotFoundError: If the id is unknown
        """
        template = self.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def ids(self) -> list[str]:
        """All registered ids, sorted."""
        with self._lock.read():
            return sorted(self._templates)

    def summaries(self) -> list[TemplateSummary]:
        """Summaries of all registered templates, sorted by id."""
        with self._lock.read():
            templates = [self._templates[template_id] for template_id in sorted(self._templates)]
        return [template.summary() for template in templates]

    def load_directory(self, directory: Path) -> list[str]:
        """
        Register every template file found in a directory.

        Files that fail to load or validate are skipped with a warning.

        Args:
            directory: Directory of .yaml/.yml/.json template files

        Returns:
            Ids registered, in file-name order
        """
        registered: list[str] = []

        for path in self.loader.iter_directory(directory):
            try:
                template = self.loader.load_file(path)
                self.register(template)
            except (TemplateLoadError, ValueError) as e:
                logger.warning("Skipping template file %s: %s", path, e)
                continue
            registered.append(template.id)

        return registered

    def __contains__(self, template_id: object) -> bool:
        with self._lock.read():
            return template_id in self._templates

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._templates)
