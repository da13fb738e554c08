"""Exceptions raised while loading and building B-Rep models."""


class ModelException(Exception):
    """Base exception for all model loading failures."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ModelLoadError(ModelException):
    """The model source could not be read or is not a B-Rep document."""


class StructuralValidationError(ModelException):
    """The solid has malformed ids or references."""
    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__('Invalid model: ' + '; '.join(self.problems))


class TopologyError(ModelException):
    """The edges of a face do not form a single closed ring."""
    def __init__(self, face_id, message='Edges of face not connected'):
        self.face_id = face_id
        super().__init__(f'{message} (face {face_id})')


class EmptyModelError(ModelException):
    """No renderable mesh could be built."""
