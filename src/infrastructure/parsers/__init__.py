# Parsers Package
from .resume_parser import ParsedCV, ResumeParser
from .cv_parser import CVParsingService

__all__ = ["CVParsingService", "ParsedCV", "ResumeParser"]
