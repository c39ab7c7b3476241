"""File classification for safe preview and editing.

Classification is driven by the file name only. The category checks run in a
fixed priority order, so a name matching several allow-lists always lands in
the first category that claims it.
"""

from .models import Classification, FileCategory

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "ico", "tiff", "tif"}

HTML_EXTENSIONS = {"html", "htm"}

OFFICE_EXTENSIONS = {
    "xlsx",
    "xls",
    "docx",
    "doc",
    "pptx",
    "ppt",
    "xlsm",
    "xlsb",
    "xltx",
    "xltm",
    "odt",
    "ods",
    "odp",
}

ARCHIVE_EXTENSIONS = {"zip", "rar", "7z", "tar", "gz", "bz2", "xz"}
COMPOUND_ARCHIVE_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz")

EXECUTABLE_EXTENSIONS = {"exe", "msi", "dmg", "pkg", "deb", "rpm", "app", "run", "bin"}

VIDEO_EXTENSIONS = {"mp4", "avi", "mkv", "mov", "wmv", "flv", "webm", "m4v", "3gp", "ogv"}

AUDIO_EXTENSIONS = {"mp3", "wav", "flac", "aac", "ogg", "m4a", "wma", "opus"}

TEXT_EXTENSIONS = {
    "txt",
    "md",
    "json",
    "xml",
    "html",
    "css",
    "js",
    "ts",
    "py",
    "java",
    "c",
    "cpp",
    "h",
    "hpp",
    "php",
    "rb",
    "go",
    "rs",
    "swift",
    "kt",
    "scala",
    "sh",
    "bat",
    "ps1",
    "yml",
    "yaml",
    "toml",
    "ini",
    "cfg",
    "conf",
    "log",
    "sql",
    "r",
    "matlab",
    "m",
    "dockerfile",
    "gitignore",
    "gitattributes",
    "license",
    "readme",
    "changelog",
    "makefile",
    "cmake",
    "gradle",
    "properties",
    "env",
}

# Conventional names that carry no extension at all
TEXT_FILENAMES = {"dockerfile", "makefile", "license", "readme", "changelog"}

BINARY_EXTENSIONS = (
    IMAGE_EXTENSIONS
    | {"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp"}
    | ARCHIVE_EXTENSIONS
    | {"exe", "dll", "so", "dylib", "bin", "run", "app", "msi", "deb", "rpm", "pkg", "dmg"}
    | VIDEO_EXTENSIONS
    | AUDIO_EXTENSIONS
    | {"ttf", "otf", "woff", "woff2", "eot"}
    | {"db", "sqlite", "sqlite3", "dat", "iso", "img"}
)

DOWNLOAD_MESSAGES: dict[FileCategory, str] = {
    FileCategory.HTML: (
        "HTML files cannot be safely previewed due to security restrictions. "
        "Click download to view the file."
    ),
    FileCategory.OFFICE: "This file is too large to preview. Click download to view.",
    FileCategory.ARCHIVE: "Archive files cannot be previewed. Click download to extract.",
    FileCategory.EXECUTABLE: "Executable files cannot be previewed. Click download to save.",
    FileCategory.PDF: "PDF files are too large to preview. Click download to view.",
    FileCategory.VIDEO: "Video files are too large to preview. Click download to view.",
    FileCategory.AUDIO: "Audio files cannot be previewed. Click download to listen.",
    FileCategory.BINARY: "This file type cannot be previewed. Click download to view.",
    FileCategory.UNKNOWN: "This file type cannot be previewed. Click download to view.",
}


def _extension(file_name: str) -> str:
    """Return the lowercased text after the last dot, or the whole name if there is none."""
    return file_name.rsplit(".", 1)[-1].lower()


def _has_compound_archive_suffix(file_name: str) -> bool:
    return file_name.lower().endswith(COMPOUND_ARCHIVE_SUFFIXES)


def is_image_file(file_name: str) -> bool:
    return _extension(file_name) in IMAGE_EXTENSIONS


def is_html_file(file_name: str) -> bool:
    return _extension(file_name) in HTML_EXTENSIONS


def is_office_file(file_name: str) -> bool:
    return _extension(file_name) in OFFICE_EXTENSIONS


def is_archive_file(file_name: str) -> bool:
    return _extension(file_name) in ARCHIVE_EXTENSIONS or _has_compound_archive_suffix(file_name)


def is_executable_file(file_name: str) -> bool:
    return _extension(file_name) in EXECUTABLE_EXTENSIONS


def is_pdf_file(file_name: str) -> bool:
    return _extension(file_name) == "pdf"


def is_video_file(file_name: str) -> bool:
    return _extension(file_name) in VIDEO_EXTENSIONS


def is_audio_file(file_name: str) -> bool:
    return _extension(file_name) in AUDIO_EXTENSIONS


def is_text_file(file_name: str) -> bool:
    return _extension(file_name) in TEXT_EXTENSIONS or file_name.lower() in TEXT_FILENAMES


def is_binary_file(file_name: str) -> bool:
    return _extension(file_name) in BINARY_EXTENSIONS or _has_compound_archive_suffix(file_name)


def _is_binary_like(file_name: str) -> bool:
    return (
        is_binary_file(file_name)
        or is_image_file(file_name)
        or is_office_file(file_name)
        or is_archive_file(file_name)
        or is_executable_file(file_name)
        or is_pdf_file(file_name)
        or is_video_file(file_name)
        or is_audio_file(file_name)
    )


def can_edit_file(file_name: str) -> bool:
    """True only for text files that no binary-like check claims."""
    if not file_name:
        return False
    return classify(file_name).editable


# Evaluated top to bottom; the first matching predicate decides the category
_PRIORITY = (
    (FileCategory.IMAGE, is_image_file),
    (FileCategory.HTML, is_html_file),
    (FileCategory.OFFICE, is_office_file),
    (FileCategory.ARCHIVE, is_archive_file),
    (FileCategory.EXECUTABLE, is_executable_file),
    (FileCategory.PDF, is_pdf_file),
    (FileCategory.VIDEO, is_video_file),
    (FileCategory.AUDIO, is_audio_file),
    (FileCategory.TEXT, is_text_file),
    (FileCategory.BINARY, is_binary_file),
)


def classify(file_name: str | None) -> Classification:
    """Map a file name to its category and capabilities.

    Never raises: empty or odd names classify as ``unknown``.

    Args:
        file_name: Bare file name or path; only the final component matters

    Returns:
        Classification with category, previewable and editable flags

    Example:
        >>> classify("README").category
        <FileCategory.TEXT: 'text'>
        >>> classify("archive.tar.gz").editable
        False
    """
    if not file_name or not isinstance(file_name, str):
        return Classification(FileCategory.UNKNOWN, previewable=False, editable=False)

    name = file_name.rsplit("/", 1)[-1]
    if not name:
        return Classification(FileCategory.UNKNOWN, previewable=False, editable=False)

    category = FileCategory.UNKNOWN
    for candidate, predicate in _PRIORITY:
        if predicate(name):
            category = candidate
            break

    editable = category is FileCategory.TEXT and not _is_binary_like(name)
    previewable = category in (FileCategory.IMAGE, FileCategory.TEXT)
    return Classification(category, previewable=previewable, editable=editable)


def download_message(category: FileCategory) -> str | None:
    """User-facing notice for categories that are download-only."""
    return DOWNLOAD_MESSAGES.get(category)
