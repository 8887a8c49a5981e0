"""Folder upload orchestration."""

from .orchestrator import UploadOrchestrator

__all__ = ['UploadOrchestrator']
