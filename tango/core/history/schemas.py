"""
Request models for learning history writes
"""

from pydantic import BaseModel, ConfigDict, Field


class UserWordUpdate(BaseModel):
    """Body of a learning history write, in the client's camelCase shape"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    word_id: int = Field(alias="wordId", gt=0)
    is_correct: bool = Field(default=False, alias="isCorrect")
    status: str | None = None
    study_type: str | None = Field(default=None, alias="studyType")
    is_learned: bool | None = Field(default=None, alias="isLearned")
