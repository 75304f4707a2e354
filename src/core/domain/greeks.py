"""
Greeks — чувствительности опциона

Знаковые fixed-point значения (масштаб 10^18), уже умноженные на размер контракта.
theta — за календарный день, vega и rho — на движение параметра в 1%.
"""

from pydantic import BaseModel, Field


class Greeks(BaseModel):
    """Набор Greeks позиции или агрегата портфеля."""

    delta: int = Field(0, description="∂V/∂S")
    gamma: int = Field(0, description="∂²V/∂S²")
    theta: int = Field(0, description="∂V/∂t за день")
    vega: int = Field(0, description="∂V/∂σ на 1%")
    rho: int = Field(0, description="∂V/∂r на 1%")

    model_config = {"frozen": True}

    def __add__(self, other: "Greeks") -> "Greeks":
        return Greeks(
            delta=self.delta + other.delta,
            gamma=self.gamma + other.gamma,
            theta=self.theta + other.theta,
            vega=self.vega + other.vega,
            rho=self.rho + other.rho,
        )

    def is_zero(self) -> bool:
        return not any((self.delta, self.gamma, self.theta, self.vega, self.rho))
