"""
errors.py
---------
Failure taxonomy for the pipeline.

- ResourceUnavailable: reference data unreachable or unparseable (fatal)
- PredictionUnavailable: one location's prediction call failed (that location is skipped)
- MalformedResponse: a prediction response arrived but lacks the expected fields
"""


class CapitalPassesError(Exception):
    pass


class ResourceUnavailable(CapitalPassesError):
    def __init__(self, resource: str, reason: str):
        self.resource = resource
        self.reason = reason
        super().__init__(f"{resource}: {reason}")


class PredictionUnavailable(CapitalPassesError):
    pass


class MalformedResponse(PredictionUnavailable):
    pass
