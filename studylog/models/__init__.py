from .note import Note
from .note_analysis import NoteAnalysis
from .learning_todo import LearningTodo

__all__ = [
    "Note",
    "NoteAnalysis",
    "LearningTodo",
]
