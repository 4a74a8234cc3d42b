"""
FileHasher module for comparing persisted page payloads between runs
"""
import hashlib
import json
from pathlib import Path
from typing import Any, Optional


class FileHasher:
    """Utility class for generating consistent content hashes"""

    @staticmethod
    def generate_content_hash(data: Any) -> str:
        """Generate MD5 hash of a JSON value, independent of key order"""
        content_str = json.dumps(data, sort_keys=True, ensure_ascii=False)
        return hashlib.md5(content_str.encode('utf-8')).hexdigest()

    @staticmethod
    def generate_file_hash(file_path: Path) -> str:
        """Generate MD5 hash of a file's bytes"""
        return hashlib.md5(file_path.read_bytes()).hexdigest()

    @staticmethod
    def compare_file_hashes(hash1: Optional[str], hash2: Optional[str]) -> bool:
        """Compare two file hashes for equality"""
        if hash1 is None or hash2 is None:
            return False
        return hash1 == hash2
