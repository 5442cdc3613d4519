"""On-demand loading of pane markup into pane containers."""

from __future__ import annotations

from loguru import logger

from prefpanes.dom.nodes import DocumentFragment, Element, Event, ProcessingInstruction
from prefpanes.dom.parser import FragmentParseError, parse_fragment
from prefpanes.prefs.bindings import BindingSynchronizer
from prefpanes.prefs.errors import FragmentIOError, MalformedFragmentError
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.registry import Pane, PaneRegistry
from prefpanes.prefs.scheduler import OneShotSignal
from prefpanes.prefs.source import FragmentSource
from prefpanes.prefs.strings import Localizer

INLINE_HANDLER_ATTRS = {"oncommand": "command"}


class FragmentLoader:
    """Imports a pane's scripts, stylesheets and markup the first time it is shown."""

    def __init__(
        self,
        host: HostWindow,
        registry: PaneRegistry,
        source: FragmentSource,
        localizer: Localizer,
        bindings: BindingSynchronizer,
    ) -> None:
        self._host = host
        self._registry = registry
        self._source = source
        self._localizer = localizer
        self._bindings = bindings
        self.first_pane_loaded = OneShotSignal()

    def ensure_loaded(self, pane_id: str) -> Pane:
        """Load ``pane_id`` unless already imported.

        Raises :class:`MalformedFragmentError` if the markup does not parse;
        the pane then stays unimported and a later call retries.
        """
        pane = self._registry.get(pane_id)
        if pane.imported:
            return pane

        descriptor = pane.descriptor
        for script in descriptor.scripts:
            self._load_script(script)
        for stylesheet in descriptor.stylesheets:
            self._host.add_stylesheet(stylesheet)

        markup = self._fetch_markup(pane)
        try:
            fragment = parse_fragment(
                markup,
                self._localizer.entities(),
                strict_markup=descriptor.strict_markup,
            )
        except FragmentParseError as exc:
            logger.error(f"[loader] pane {pane_id}: {exc}")
            raise MalformedFragmentError(pane_id, descriptor.src, str(exc)) from exc

        self._relocate_processing_instructions(fragment)
        pane.container.append(fragment)
        self._init_inserted(pane.container)
        pane.imported = True
        logger.info(f"[loader] loaded pane {pane_id}")

        for child in pane.container.children:
            child.dispatch_event(Event("load"))
        self.first_pane_loaded.set()
        return pane

    def _load_script(self, uri: str) -> None:
        if self._host.has_script(uri):
            return
        try:
            source = self._source.fetch_text(uri)
        except FragmentIOError as exc:
            logger.error(f"[loader] cannot load script {uri}: {exc}")
            return
        try:
            self._host.run_script(uri, source)
        except Exception:
            logger.exception(f"[loader] script {uri} raised")

    def _fetch_markup(self, pane: Pane) -> str:
        src = pane.descriptor.src
        if not src:
            return ""
        try:
            return self._source.fetch_text(src)
        except FragmentIOError as exc:
            logger.error(f"[loader] pane {pane.id}: {exc}; showing empty content")
            return ""

    def _relocate_processing_instructions(self, fragment: DocumentFragment) -> None:
        """Move instructions to the document root, where they take effect."""
        found = [n for n in fragment.iter_nodes() if isinstance(n, ProcessingInstruction)]
        for pi in found:
            if pi.target == "xml-stylesheet":
                href = _pseudo_attr(pi.data, "href")
                if href and href in self._host.loaded_stylesheets:
                    pi.remove()
                    continue
                if href:
                    self._host.loaded_stylesheets.append(href)
            self._host.add_processing_instruction(pi.target, pi.data)
            pi.remove()

    def _init_inserted(self, container: Element) -> None:
        self._bindings.track(container)
        for attr, event_type in INLINE_HANDLER_ATTRS.items():
            for elem in container.elements_with_attribute(attr):
                code = elem.get_attribute(attr) or ""
                try:
                    elem.set_handler(event_type, self._host.compile_handler(code, elem))
                except SyntaxError as exc:
                    logger.error(f"[loader] bad {attr} handler on <{elem.tag}>: {exc}")


def _pseudo_attr(data: str, name: str) -> str | None:
    marker = f'{name}="'
    start = data.find(marker)
    if start == -1:
        return None
    start += len(marker)
    end = data.find('"', start)
    return data[start:end] if end != -1 else None
