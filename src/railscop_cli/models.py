from typing import Optional

from pydantic import BaseModel


class LintIssue(BaseModel):
    severity: str
    file_path: str
    line_number: int
    column: int
    rule_id: str
    message: str
    suggestion: Optional[str] = None
    auto_fixable: bool = False
