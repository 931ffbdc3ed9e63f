from .file_utils import list_repo_files, should_ignore_path
from .formatting_utils import truncate_prompt

__all__ = ["list_repo_files", "should_ignore_path", "truncate_prompt"]
