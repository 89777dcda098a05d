"""Astrokit Exception Classes

Base exception hierarchy for the astrokit scaffolder.
All custom exceptions include help_text for actionable user guidance.
"""

from typing import Any, Dict, List, Optional


class AstrokitError(Exception):
    """Base exception for all astrokit errors
    
    Attributes:
        message: Human-readable error description
        help_text: Optional actionable guidance for resolving the error
    """
    
    def __init__(self, message: str, help_text: str = None):
        self.message = message
        self.help_text = help_text
        super().__init__(message)
    
    def __str__(self) -> str:
        """Format error message with help text if available"""
        if self.help_text:
            return f"{self.message}\n\nHelp: {self.help_text}"
        return self.message


class ConfigError(AstrokitError):
    """Anticipated failure raised anywhere in the scaffolding pipeline
    
    The details mapping carries structured diagnostics (missing files,
    failing command, stderr excerpt) that the CLI dumps under the message.
    """
    
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        help_text: str = None
    ):
        super().__init__(message, help_text)
        self.details = dict(details or {})


class CommandError(ConfigError):
    """Raised when an external command exits non-zero, times out or cannot start"""
    
    def __init__(
        self,
        command: str,
        error: str,
        stderr: Optional[str] = None,
        exit_code: Optional[int] = None
    ):
        details = {"command": command, "error": error}
        if exit_code is not None:
            details["exit_code"] = exit_code
        if stderr:
            details["stderr"] = stderr
        
        super().__init__(f"Command failed: {command}", details)
        self.command = command
        self.error = error
        self.stderr = stderr
        self.exit_code = exit_code


class ToolchainError(ConfigError):
    """Raised when Node.js is missing or older than the supported floor"""
    
    def __init__(self, minimum: int, found: Optional[str] = None):
        if found:
            message = f"Node.js {minimum}+ is required (found: {found})"
        else:
            message = f"Node.js {minimum}+ is required but 'node' was not found in PATH"
        
        help_text = (
            "Install a current Node.js release from https://nodejs.org/ "
            "or switch versions with: nvm install --lts"
        )
        
        super().__init__(message, {"minimum": minimum, "found": found}, help_text)
        self.minimum = minimum
        self.found = found


class PipelineAbortedError(ConfigError):
    """Raised when a step with the abort-run policy fails
    
    Reports which steps completed before the failure and which never ran,
    so the half-built project can be inspected rather than guessed at.
    """
    
    def __init__(
        self,
        step: str,
        cause: ConfigError,
        completed_steps: List[str],
        remaining_steps: List[str]
    ):
        details = dict(cause.details)
        details["step"] = step
        
        help_text = cause.help_text
        if completed_steps:
            note = "Steps completed before the failure were not rolled back."
            help_text = f"{help_text}\n\n{note}" if help_text else note
        
        super().__init__(f"Step '{step}' failed: {cause.message}", details, help_text)
        self.step = step
        self.cause = cause
        self.completed_steps = list(completed_steps)
        self.remaining_steps = list(remaining_steps)


class PromptCancelled(AstrokitError):
    """Raised when the user dismisses a prompt
    
    Not a failure: the orchestrator turns it into a clean early exit.
    """
    
    def __init__(self, question: str):
        super().__init__(f"Prompt cancelled: {question}")
        self.question = question
