from pydantic import BaseModel, ConfigDict


class ActionOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)


class Navigate(ActionOutcome):
    target: str


class StayAndRevalidate(ActionOutcome):
    path: str


class Failure(ActionOutcome):
    message: str

    def state(self) -> dict:
        return {"errors": {}, "message": self.message}


class NotFound(Failure):
    message: str = "Invoice not found."


class ValidationFailure(ActionOutcome):
    errors: dict[str, list[str]]
    message: str

    def state(self) -> dict:
        return {"errors": self.errors, "message": self.message}


ActionResult = Navigate | StayAndRevalidate | Failure | ValidationFailure
