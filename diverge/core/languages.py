"""
Language detection from file names.

The returned tag selects the outline grammar and would select syntax
highlighting in a diff view.
"""

from __future__ import annotations

from diverge.core.paths import file_name


PLAINTEXT = "plaintext"

EXTENSION_MAP: dict[str, str] = {
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.json': 'json',
    '.jsonc': 'jsonc',
    '.toml': 'toml',
    '.md': 'markdown',
    '.ts': 'typescript',
    '.tsx': 'typescript',
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.py': 'python',
    '.rs': 'rust',
    '.go': 'go',
    '.java': 'java',
    '.c': 'c',
    '.cpp': 'cpp',
    '.h': 'c',
    '.hpp': 'cpp',
    '.sh': 'shell',
    '.bash': 'shell',
    '.css': 'css',
    '.scss': 'scss',
    '.html': 'html',
    '.xml': 'xml',
    '.sql': 'sql',
    '.tf': 'hcl',
    '.hcl': 'hcl',
    '.dockerfile': 'dockerfile',
    '.rb': 'ruby',
    '.php': 'php',
    '.swift': 'swift',
    '.kt': 'kotlin',
}

FILENAME_MAP: dict[str, str] = {
    'Dockerfile': 'dockerfile',
    'Makefile': 'makefile',
    'Jenkinsfile': 'groovy',
}


def language_for_file(path: str) -> str:
    """Return the language tag for a relative or absolute path."""
    name = file_name(path.replace("\\", "/"))

    if name in FILENAME_MAP:
        return FILENAME_MAP[name]

    dot = name.rfind(".")
    if dot != -1:
        language = EXTENSION_MAP.get(name[dot:].lower())
        if language:
            return language

    return PLAINTEXT
