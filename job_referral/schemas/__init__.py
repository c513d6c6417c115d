from .common import ErrorKind, TraceEvent
from .extraction import ExtractionResult, InferenceResult
from .mapping import FieldMapping, FormField, MappingResult
from .match import MatchRequest, MatchResult, PostingCheck
from .resume import DateEntry, ResumeFields
from .submission import SubmissionRequest, SubmissionResult
from .upstream import MemoRecord, SimpleRecord, UpstreamRecord, parse_upstream_record

__all__ = [
    "ErrorKind",
    "TraceEvent",
    "ExtractionResult",
    "InferenceResult",
    "FormField",
    "FieldMapping",
    "MappingResult",
    "MatchRequest",
    "MatchResult",
    "PostingCheck",
    "DateEntry",
    "ResumeFields",
    "SubmissionRequest",
    "SubmissionResult",
    "SimpleRecord",
    "MemoRecord",
    "UpstreamRecord",
    "parse_upstream_record",
]
