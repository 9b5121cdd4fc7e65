from pathlib import Path
from typing import Optional


class Session:
    """
    API 클라이언트가 사용하는 토큰 저장소.
    메모리 토큰이 우선이며, 없으면 파일에 저장된 토큰을 사용합니다.
    """

    def __init__(self, token_file: Optional[Path | str] = None) -> None:
        self.token: Optional[str] = None
        self.token_file = Path(token_file) if token_file else None

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def get_token(self) -> Optional[str]:
        return self.token or self.load_token()

    def load_token(self) -> Optional[str]:
        if self.token_file is None or not self.token_file.exists():
            return None
        return self.token_file.read_text(encoding="utf-8").strip() or None

    def save_token(self, token: str) -> None:
        """토큰을 메모리와 파일 모두에 기록합니다."""
        self.token = token
        if self.token_file is not None:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            self.token_file.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        self.token = None
        if self.token_file is not None:
            self.token_file.unlink(missing_ok=True)
