"""Text extraction collaborator for scanned recipe documents.

Responsibilities:
- Define the block extraction protocol used by the file processor.
- Provide an AWS Textract-backed implementation returning typed blocks.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..aws_client import aws_error_to_provider_error, create_aws_client
from ..errors import ExtractionError
from ..models.datatypes import ExtractionBlock


class BlockExtractor(Protocol):
    """Protocol for document text extraction providers."""

    def extract_blocks(self, document: bytes) -> list[ExtractionBlock]:
        """Return extraction blocks in reading order for one document."""


class TextractBlockExtractor:
    """AWS Textract `AnalyzeDocument` extractor."""

    FEATURE_TYPES = ("FORMS", "TABLES")

    def __init__(self, region_name: str = "us-west-2", client: Any | None = None) -> None:
        """Initialize the extractor with an optional preconfigured Textract client."""

        self.region_name = region_name
        self._client = client

    @property
    def client(self) -> Any:
        """Return the Textract client, creating it on first use."""

        if self._client is None:
            self._client = create_aws_client("textract", self.region_name)
        return self._client

    def extract_blocks(self, document: bytes) -> list[ExtractionBlock]:
        """Analyze one document and return its blocks in response order."""

        if not document:
            raise ExtractionError("Document is empty.")
        try:
            response = self.client.analyze_document(
                Document={"Bytes": document},
                FeatureTypes=list(self.FEATURE_TYPES),
            )
        except Exception as exc:
            raise aws_error_to_provider_error("textract", exc) from exc

        raw_blocks = response.get("Blocks") if isinstance(response, dict) else None
        if not isinstance(raw_blocks, list):
            raise ExtractionError("Textract response did not include `Blocks`.")
        return [self._to_block(raw) for raw in raw_blocks if isinstance(raw, dict)]

    @staticmethod
    def _to_block(raw: dict[str, Any]) -> ExtractionBlock:
        """Convert one Textract block payload into an `ExtractionBlock`."""

        text = raw.get("Text")
        return ExtractionBlock(
            block_type=str(raw.get("BlockType", "")),
            text=text if isinstance(text, str) else None,
        )
