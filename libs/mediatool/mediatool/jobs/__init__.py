"""Job runners wrapping the external transcoder and speech recogniser."""

from mediatool.config import Settings
from mediatool.jobs.base import ExtractionJob, TranscriptionJob
from mediatool.jobs.extraction import FFmpegExtractionJob
from mediatool.jobs.ffmpeg import FFmpegRunner
from mediatool.jobs.transcription import WhisperTranscriptionJob


def get_extraction_job(settings: Settings) -> ExtractionJob:
    return FFmpegExtractionJob(settings)


def get_transcription_job(settings: Settings) -> TranscriptionJob:
    return WhisperTranscriptionJob(settings)


__all__ = [
    "ExtractionJob",
    "FFmpegExtractionJob",
    "FFmpegRunner",
    "TranscriptionJob",
    "WhisperTranscriptionJob",
    "get_extraction_job",
    "get_transcription_job",
]
