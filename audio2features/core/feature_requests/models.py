"""AudioFile and FeatureRequest models."""

from sqlalchemy import BigInteger, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from audio2features.core.database.base import Base, TimestampMixin, UUIDMixin


class AudioFile(Base, UUIDMixin, TimestampMixin):
    """
    Metadata for one accepted upload.

    Written once before AI processing starts and never updated.
    """

    __tablename__ = "audio_files"

    file_name: Mapped[str] = mapped_column(String(1000), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    file_type: Mapped[str] = mapped_column(String(255), nullable=False)  # MIME type
    storage_key: Mapped[str | None] = mapped_column(String(1000))

    feature_requests: Mapped[list["FeatureRequest"]] = relationship(back_populates="audio_file")

    def __repr__(self) -> str:
        return f"<AudioFile {self.id} ({self.file_type})>"


class FeatureRequest(Base, UUIDMixin, TimestampMixin):
    """
    One persisted feature request extracted from an audio file.

    Content columns are nullable: an upload with nothing actionable still gets
    a single row carrying only the extraction summary.
    """

    __tablename__ = "feature_requests"

    audio_file_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("audio_files.id"),
        nullable=False,
        index=True,
    )

    title: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    priority: Mapped[str | None] = mapped_column(String(50))
    category: Mapped[str | None] = mapped_column(String(50))
    confidence: Mapped[float | None] = mapped_column(Float)
    potential_recommendation: Mapped[str | None] = mapped_column(Text)
    # Duplicated onto every row of the same upload
    summary: Mapped[str | None] = mapped_column(Text)

    audio_file: Mapped["AudioFile"] = relationship(back_populates="feature_requests")

    @property
    def is_placeholder(self) -> bool:
        return self.title is None

    def __repr__(self) -> str:
        return f"<FeatureRequest {self.id} {self.title!r}>"
