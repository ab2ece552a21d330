"""
Vite asset integration: dev server tags, manifest tags and asset versioning
"""
import hashlib
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from jinja2.utils import htmlsafe_json_dumps
from markupsafe import Markup, escape

from app.core.config import Settings, get_settings
from app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

CSS_EXTENSIONS = (".css", ".less", ".sass", ".scss", ".styl", ".stylus", ".pcss", ".postcss")

# path -> (mtime, parsed manifest, md5)
_manifest_cache: Dict[Path, Tuple[float, dict, str]] = {}


class ViteError(Exception):
    """Raised when an entry point cannot be resolved"""


class ViteManifestNotFoundError(ViteError):
    """Raised when the build manifest is missing and no dev server is running"""


def _is_css(path: str) -> bool:
    return path.lower().endswith(CSS_EXTENSIONS)


def clear_manifest_cache():
    _manifest_cache.clear()


class Vite:
    """Builds the asset tags for the root view"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def hot_file(self) -> Path:
        return self.settings.resolve_path(self.settings.vite_hot_file)

    @property
    def manifest_path(self) -> Path:
        build_dir = self.settings.resolve_path(self.settings.vite_build_dir)
        return build_dir / self.settings.vite_manifest

    def hot_url(self) -> Optional[str]:
        """Dev server URL from the hot file or settings, None when serving a build"""
        if self.hot_file.is_file():
            url = self.hot_file.read_text(encoding="utf-8").strip()
            if url:
                return url.rstrip("/")
        if self.settings.vite_dev_server_url:
            return self.settings.vite_dev_server_url.rstrip("/")
        return None

    def is_running_hot(self) -> bool:
        return self.hot_url() is not None

    def _load(self) -> Tuple[dict, str]:
        path = self.manifest_path
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            raise ViteManifestNotFoundError(f"Vite manifest not found at: {path}")

        cached = _manifest_cache.get(path)
        if cached and cached[0] == mtime:
            return cached[1], cached[2]

        raw = path.read_bytes()
        manifest = json.loads(raw)
        digest = hashlib.md5(raw).hexdigest()
        _manifest_cache[path] = (mtime, manifest, digest)
        logger.debug("Loaded Vite manifest", extra={"manifest": str(path), "chunks": len(manifest)})
        return manifest, digest

    def manifest(self) -> dict:
        return self._load()[0]

    def manifest_hash(self) -> Optional[str]:
        """md5 of the build manifest, None when there is no build or the dev server is running"""
        if self.is_running_hot():
            return None
        try:
            return self._load()[1]
        except ViteManifestNotFoundError:
            return None

    def asset_url(self, file: str) -> str:
        return f"{self.settings.vite_build_url.rstrip('/')}/{file.lstrip('/')}"

    def _chunk(self, manifest: dict, entry: str) -> dict:
        try:
            return manifest[entry]
        except KeyError:
            raise ViteError(f"Unable to locate file in Vite manifest: {entry}.")

    @staticmethod
    def _tag_for(url: str) -> str:
        if _is_css(url):
            return f'<link rel="stylesheet" href="{escape(url)}" />'
        return f'<script type="module" src="{escape(url)}"></script>'

    @staticmethod
    def _preload_for(url: str) -> str:
        if _is_css(url):
            return f'<link rel="preload" as="style" href="{escape(url)}" />'
        return f'<link rel="modulepreload" href="{escape(url)}" />'

    def _hot_tags(self, hot_url: str, entrypoints: Iterable[str]) -> List[str]:
        tags = [self._tag_for(f"{hot_url}/@vite/client")]
        tags.extend(self._tag_for(f"{hot_url}/{entry}") for entry in entrypoints)
        return tags

    def _collect_imports(self, manifest: dict, chunk: dict, seen: set, out: List[dict]):
        """Static imports of a chunk, depth first, deduplicated"""
        for key in chunk.get("imports", []):
            if key in seen:
                continue
            seen.add(key)
            imported = self._chunk(manifest, key)
            self._collect_imports(manifest, imported, seen, out)
            out.append(imported)

    def entry_files(self, entrypoints: Iterable[str]) -> Tuple[List[str], List[str], List[str]]:
        """(preloads, stylesheets, scripts) asset URLs for the given entries"""
        manifest = self.manifest()
        preloads: List[str] = []
        styles: List[str] = []
        scripts: List[str] = []
        seen: set = set()

        def add(bucket: List[str], url: str):
            if url not in bucket:
                bucket.append(url)

        for entry in entrypoints:
            chunk = self._chunk(manifest, entry)
            imported: List[dict] = []
            self._collect_imports(manifest, chunk, seen, imported)
            for dep in imported:
                add(preloads, self.asset_url(dep["file"]))
                for css in dep.get("css", []):
                    add(preloads, self.asset_url(css))
                    add(styles, self.asset_url(css))

            entry_url = self.asset_url(chunk["file"])
            add(preloads, entry_url)
            for css in chunk.get("css", []):
                add(preloads, self.asset_url(css))
                add(styles, self.asset_url(css))
            if _is_css(entry_url):
                add(styles, entry_url)
            else:
                add(scripts, entry_url)

        return preloads, styles, scripts

    def prefetch_script(self, loaded: Iterable[str]) -> str:
        """Script that prefetches the remaining build chunks after window load"""
        concurrency = self.settings.vite_prefetch_concurrency
        if concurrency <= 0:
            return ""
        loaded = set(loaded)
        assets = []
        for chunk in self.manifest().values():
            files = [chunk["file"], *chunk.get("css", [])]
            for file in files:
                url = self.asset_url(file)
                if url in loaded:
                    continue
                loaded.add(url)
                asset = {"rel": "prefetch", "href": url}
                if _is_css(url):
                    asset["as"] = "style"
                assets.append(asset)
        if not assets:
            return ""
        return (
            "<script>"
            "window.addEventListener('load', () => window.setTimeout(() => {"
            f"const assets = {htmlsafe_json_dumps(assets, separators=(',', ':'))};"
            f"const concurrency = {int(concurrency)};"
            "const next = () => {"
            "const asset = assets.shift();"
            "if (!asset) return;"
            "const link = document.createElement('link');"
            "link.rel = asset.rel; link.href = asset.href;"
            "if (asset.as) link.as = asset.as;"
            "link.onload = next; link.onerror = next;"
            "document.head.append(link);"
            "};"
            "for (let i = 0; i < concurrency; i++) next();"
            "}))"
            "</script>"
        )

    def tags(self, entrypoints: Iterable[str]) -> Markup:
        """All tags for the given entry points, dev server or build"""
        entrypoints = list(entrypoints)
        hot_url = self.hot_url()
        if hot_url:
            return Markup("\n".join(self._hot_tags(hot_url, entrypoints)))

        preloads, styles, scripts = self.entry_files(entrypoints)
        tags = [self._preload_for(url) for url in preloads]
        tags.extend(self._tag_for(url) for url in styles)
        tags.extend(self._tag_for(url) for url in scripts)
        prefetch = self.prefetch_script(preloads + styles + scripts)
        if prefetch:
            tags.append(prefetch)
        return Markup("\n".join(tags))


def page_entrypoints(component: str) -> List[str]:
    """Entry points the root view loads for a page component"""
    return ["frontend/js/app.js", f"frontend/js/pages/{component}.vue"]


def vite_tags(*entrypoints: str) -> Markup:
    """Template helper"""
    return Vite().tags(entrypoints)


def page_tags(component: str) -> Markup:
    """Tags for the client entry and the page component chunk"""
    return Vite().tags(page_entrypoints(component))
