from pydantic import BaseModel, ConfigDict, Field


class MealItem(BaseModel):
    name: str
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0

    model_config = ConfigDict(extra="ignore")


class MacroSummary(BaseModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class MealPlan(BaseModel):
    """One day of meals as returned by the text-generation service."""

    breakfast: list[MealItem] = Field(default_factory=list)
    lunch: list[MealItem] = Field(default_factory=list)
    dinner: list[MealItem] = Field(default_factory=list)
    snacks: list[MealItem] = Field(default_factory=list)
    summary: MacroSummary | None = None

    model_config = ConfigDict(extra="ignore")

    def items(self) -> list[MealItem]:
        return [*self.breakfast, *self.lunch, *self.dinner, *self.snacks]

    def computed_summary(self) -> MacroSummary:
        items = self.items()
        return MacroSummary(
            calories=sum(i.calories for i in items),
            protein=sum(i.protein for i in items),
            carbs=sum(i.carbs for i in items),
            fat=sum(i.fat for i in items),
        )
