"""
Template engine setup for NormForm views.

This module implements the `TemplateManager`, a thin wrapper around a Jinja2
`Environment` configured the way form views need it:

    1.  **Loading:** templates come from a source directory (plus optional
        extra directories searched after it).
    2.  **Caching:** compiled templates are written to a cache directory
        through Jinja2's `FileSystemBytecodeCache`.
    3.  **Auto reload:** with `auto_reload` on, Jinja2 compares the source
        modification time on every lookup and recompiles stale templates
        instead of serving the cached code.
    4.  **Globals:** values and helpers injected into every template.
"""

from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from jinja2 import (
    Environment,
    FileSystemBytecodeCache,
    FileSystemLoader,
    StrictUndefined,
    Template,
    Undefined,
    select_autoescape,
)
from normform_core.logging import get_logger

logger = get_logger(__name__)


class TemplateManager:
    """
    Owns the Jinja2 environment used by a view.

    Attributes:
        env (Environment): The configured Jinja2 environment.
        directories (list[str]): Absolute template search paths, in priority
            order.
        cache_directory (Path | None): Where compiled templates are stored,
            or None when caching is disabled.
    """

    def __init__(
        self,
        template_directory: Path | str,
        cache_directory: Path | str | None = None,
        *,
        auto_reload: bool = True,
        strict_undefined: bool = False,
        extra_directories: Sequence[Path | str] | None = None,
        global_context: Mapping[str, Any] | None = None,
        global_functions: Mapping[str, Callable] | None = None,
    ):
        """
        Initialize the manager and build the environment immediately.

        Args:
            template_directory (Path | str): Directory holding the template
                sources. It has the highest lookup priority.

            cache_directory (Path | str | None): Directory for compiled
                templates. Created on demand. If it cannot be created, the
                manager logs a warning and renders without a cache.

            auto_reload (bool): Recompile templates whose source is newer
                than the cached code.

            strict_undefined (bool): Raise on undefined template variables
                instead of rendering them as empty strings.

            extra_directories (Sequence[Path | str] | None): Further search
                paths, consulted after `template_directory`.

            global_context (Mapping[str, Any] | None): Variables available in
                every template.

            global_functions (Mapping[str, Callable] | None): Functions
                available in every template.

        Example:
            >>> manager = TemplateManager("templates", "templates_c")
            >>> manager.add_global("site_name", "NormForm")
            >>> # manager.render("form.html.jinja", {"title": "Sign up"})
        """
        self.directories: list[str] = []
        self._add_directory(template_directory)
        if extra_directories:
            for d in extra_directories:
                self._add_directory(d)

        self.cache_directory = self._prepare_cache_directory(cache_directory)
        bytecode_cache = (
            FileSystemBytecodeCache(str(self.cache_directory))
            if self.cache_directory is not None
            else None
        )

        logger.debug(
            "Template engine initialized with directories %s (cache: %s)",
            self.directories,
            self.cache_directory,
        )

        undefined: type[Undefined] = StrictUndefined if strict_undefined else Undefined
        self.env = Environment(
            loader=FileSystemLoader(self.directories),
            bytecode_cache=bytecode_cache,
            auto_reload=auto_reload,
            undefined=undefined,
            autoescape=select_autoescape(
                enabled_extensions=("html", "htm", "xml", "jinja", "j2"),
                default_for_string=True,
            ),
        )

        if global_context:
            for name, value in global_context.items():
                self.add_global(name, value)

        if global_functions:
            for name, func in global_functions.items():
                self.add_global(name, func)

    def add_global(self, name: str, value: Any) -> None:
        self.env.globals[name] = value

    def get_template(self, name: str) -> Template:
        return self.env.get_template(name)

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """
        Load `name` and render it with `context`.

        Jinja2 exceptions are propagated unchanged; the view decides how
        they are reported.
        """
        return self.get_template(name).render(context)

    def _add_directory(self, path: Path | str) -> None:
        """
        Register a search path, resolved to an absolute path so `./templates`
        and `/app/templates` are not registered twice.
        """
        path_str = str(Path(path).resolve())
        if path_str not in self.directories:
            self.directories.append(path_str)

    @staticmethod
    def _prepare_cache_directory(path: Path | str | None) -> Path | None:
        if path is None:
            return None
        cache_dir = Path(path).resolve()
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(
                "Template cache directory %s is not usable, caching disabled: %s",
                cache_dir,
                e,
            )
            return None
        return cache_dir


__all__ = ["TemplateManager"]
