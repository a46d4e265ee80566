"""TableTalk Datasets Module - Upload, parse, and summarize tabular files."""

from tabletalk.modules.datasets.service import DatasetsService, generate_file_id

__all__ = ["DatasetsService", "generate_file_id"]
