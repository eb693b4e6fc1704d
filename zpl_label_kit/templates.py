"""
JSON-backed store of ZPL templates rendered with Jinja2.

Templates write {{ ll }} where the label length belongs; it expands to the
length placeholder that the engine later replaces with ^LL.
"""

# Standard Library
import json
import os
import pathlib
import shutil
import threading
import typing

# PIP3 modules
import jinja2

# local repo modules
import zpl_label_kit as zlk
import zpl_label_kit.config
import zpl_label_kit.engine


LabelSourceError = zlk.engine.LabelSourceError

LL_MARKER = zlk.config.LL_MARKER
ARCHIVE_VERSION = 1
DEFAULT_FILENAME = "templates.json"


class TemplateStore:
	"""
	Named ZPL templates persisted as a single JSON archive.
	"""

	def __init__(self, path: pathlib.Path):
		self.path = pathlib.Path(path)
		self._lock = threading.Lock()
		self._templates: dict[str, str] = {}
		self._environment = jinja2.Environment(
			loader=jinja2.FunctionLoader(self._load_source),
			autoescape=False,
			trim_blocks=True,
			lstrip_blocks=True,
			undefined=jinja2.StrictUndefined,
			auto_reload=True,
		)
		self._environment.globals["ll"] = LL_MARKER

	#============================================
	def _load_source(self, name: str) -> tuple[str, None, typing.Callable[[], bool]] | None:
		with self._lock:
			source = self._templates.get(name)
		if source is None:
			return None
		# always report stale so edits through set() are picked up
		return (source, None, lambda: False)

	#============================================
	def load(self) -> None:
		"""
		Load the archive from disk. A missing file leaves the store empty.
		"""
		if not self.path.exists():
			return
		with self.path.open("r", encoding="utf-8") as handle:
			try:
				data = json.load(handle)
			except json.JSONDecodeError as error:
				raise LabelSourceError(f"Invalid template archive {self.path}: {error}") from error
		templates = data.get("templates", {}) if isinstance(data, dict) else None
		if not isinstance(templates, dict):
			raise LabelSourceError(f"Invalid template archive: {self.path}")
		with self._lock:
			self._templates = {str(name): str(text) for name, text in templates.items()}

	#============================================
	def save(self, pretty: bool = True) -> None:
		"""
		Write the archive atomically via a temporary file.

		Args:
			pretty: Indent and sort keys.
		"""
		with self._lock:
			data = {"version": ARCHIVE_VERSION, "templates": dict(self._templates)}
		if pretty:
			text = json.dumps(data, indent=2, sort_keys=True)
		else:
			text = json.dumps(data)
		self.path.parent.mkdir(parents=True, exist_ok=True)
		tmp_path = self.path.with_name(self.path.name + ".tmp")
		tmp_path.write_text(text, encoding="utf-8")
		os.replace(tmp_path, self.path)

	#============================================
	def list_names(self) -> list[str]:
		with self._lock:
			return sorted(self._templates)

	#============================================
	def get(self, name: str) -> str | None:
		with self._lock:
			return self._templates.get(name)

	#============================================
	def set(self, name: str, text: str) -> None:
		with self._lock:
			self._templates[name] = text

	#============================================
	def delete(self, name: str) -> None:
		with self._lock:
			self._templates.pop(name, None)

	#============================================
	def render(self, name: str, context: dict[str, typing.Any] | None = None) -> str:
		"""
		Render a named template.

		Args:
			name: Template name.
			context: Template variables.

		Returns:
			Rendered ZPL text.
		"""
		try:
			template = self._environment.get_template(name)
		except jinja2.TemplateNotFound as error:
			raise LabelSourceError(f"Template not found: {name}") from error
		except jinja2.TemplateError as error:
			raise LabelSourceError(f"Template {name!r} is invalid: {error}") from error
		try:
			return template.render(**(context or {}))
		except jinja2.TemplateError as error:
			raise LabelSourceError(f"Template {name!r} failed to render: {error}") from error


#============================================
def find_first_existing(
	base_dir: pathlib.Path,
	folder_names: typing.Iterable[str],
	filename: str,
) -> pathlib.Path | None:
	"""
	Find the first legacy folder that holds the archive file.
	"""
	for folder_name in folder_names:
		candidate = base_dir / folder_name / filename
		if candidate.exists():
			return candidate
	return None


#============================================
def open_template_store(
	base_dir: pathlib.Path,
	preferred_folder: str,
	legacy_folders: typing.Iterable[str] = (),
	filename: str = DEFAULT_FILENAME,
) -> TemplateStore:
	"""
	Open the store in the preferred folder, migrating a legacy archive.

	When the preferred archive does not exist yet, the first archive found in
	a legacy folder is copied (not moved) into place.

	Args:
		base_dir: Application support directory.
		preferred_folder: Folder name to use.
		legacy_folders: Older folder names to migrate from.
		filename: Archive filename.

	Returns:
		TemplateStore for the preferred archive (not yet loaded).
	"""
	base_dir = pathlib.Path(base_dir)
	preferred_dir = base_dir / preferred_folder
	preferred_dir.mkdir(parents=True, exist_ok=True)
	preferred_path = preferred_dir / filename
	if not preferred_path.exists():
		legacy_path = find_first_existing(base_dir, legacy_folders, filename)
		if legacy_path is not None:
			print(f"Migrating templates from {legacy_path}")
			shutil.copy2(legacy_path, preferred_path)
	return TemplateStore(preferred_path)
