"""Catalog models: component, step and offer definitions."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from ..constants import ACCESS_CONTROL_PURPOSE


class EnvVarTemplate(BaseModel):
    """Environment variable injected into the primary step's workload."""

    key: str = Field(..., description="Variable name")
    value: str = Field(..., description="Value template, may contain {{placeholders}}")


class StepDefinition(BaseModel):
    """One provisioning action in a component pipeline."""

    id: str = Field(..., description="Step ID, unique within the component")
    name: str = Field(..., description="Display name")
    playbook: str = Field(..., description="Runner action executed for this step")
    context_dir: Optional[str] = Field(
        None, description="Build context subdirectory of the deployable artifact"
    )
    extra_vars: Dict[str, Any] = Field(
        default_factory=dict, description="Fixed parameters passed to the runner"
    )
    purpose: Optional[str] = Field(
        None, description="Declared purpose, e.g. 'access-control'"
    )
    primary: Optional[bool] = Field(
        None, description="Primary step flag (defaults to having a context_dir)"
    )

    @model_validator(mode="after")
    def _default_primary(self) -> "StepDefinition":
        if self.primary is None:
            self.primary = self.context_dir is not None
        return self

    @property
    def is_access_control(self) -> bool:
        return self.purpose == ACCESS_CONTROL_PURPOSE


class ComponentDefinition(BaseModel):
    """An independently deployable component and its pipeline."""

    id: str = Field(..., description="Unique component ID")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="Short description")
    icon: str = Field(default="", description="Icon shown by the UI")
    category: str = Field(default="infra", description="Category key")
    order: int = Field(default=0, description="Position in deploy-all schedules")
    namespace: Optional[str] = Field(None, description="Target namespace")
    playbook: Optional[str] = Field(None, description="Default single-step action")
    context_dir: Optional[str] = Field(None, description="Default build context")
    port: Optional[int] = Field(None, description="Service port")
    env_vars: List[EnvVarTemplate] = Field(default_factory=list)
    sub_steps: List[StepDefinition] = Field(default_factory=list)
    required: bool = Field(
        default=False, description="Stop batch deployments when this component fails"
    )

    @model_validator(mode="after")
    def _validate_steps(self) -> "ComponentDefinition":
        if not self.sub_steps and not self.playbook:
            raise ValueError(
                f"Component {self.id} needs a playbook or at least one sub step"
            )
        primaries = [s for s in self.steps if s.primary]
        if len(primaries) != 1:
            raise ValueError(
                f"Component {self.id} must have exactly one primary step, "
                f"found {len(primaries)}"
            )
        return self

    @property
    def target_namespace(self) -> str:
        return self.namespace or self.id

    @property
    def steps(self) -> List[StepDefinition]:
        """Ordered pipeline steps; a component without sub steps has one."""
        if self.sub_steps:
            return list(self.sub_steps)
        return [
            StepDefinition(
                id=self.id,
                name=self.name,
                playbook=self.playbook,
                context_dir=self.context_dir,
                primary=True,
            )
        ]

    @property
    def has_access_control_step(self) -> bool:
        return any(s.is_access_control for s in self.steps)


class OfferDefinition(BaseModel):
    """Named subset of components deployed and cleaned up together."""

    id: str = Field(..., description="Unique offer ID")
    name: str = Field(..., description="Display name")
    description: str = Field(default="")
    icon: str = Field(default="")
    color: str = Field(default="")
    component_ids: List[str] = Field(default_factory=list)
    topology: Optional[Dict[str, Any]] = Field(
        None, description="Presentation metadata for the UI"
    )


class Category(BaseModel):
    """Display metadata for a component category."""

    label: str
    color: str = ""


class Catalog(BaseModel):
    """Static, read-only list of component and offer definitions."""

    components: List[ComponentDefinition] = Field(default_factory=list)
    offers: List[OfferDefinition] = Field(default_factory=list)
    categories: Dict[str, Category] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_references(self) -> "Catalog":
        seen = set()
        for component in self.components:
            if component.id in seen:
                raise ValueError(f"Duplicate component id: {component.id}")
            seen.add(component.id)
        for offer in self.offers:
            missing = [cid for cid in offer.component_ids if cid not in seen]
            if missing:
                raise ValueError(
                    f"Offer {offer.id} references unknown components: "
                    f"{', '.join(missing)}"
                )
        return self

    def get_component(self, component_id: str) -> Optional[ComponentDefinition]:
        for component in self.components:
            if component.id == component_id:
                return component
        return None

    def get_offer(self, offer_id: str) -> Optional[OfferDefinition]:
        for offer in self.offers:
            if offer.id == offer_id:
                return offer
        return None

    def schedule(
        self, component_ids: Optional[List[str]] = None
    ) -> List[ComponentDefinition]:
        """Components ordered by ``order``; ties keep catalog order."""
        if component_ids is None:
            selected = list(self.components)
        else:
            wanted = set(component_ids)
            selected = [c for c in self.components if c.id in wanted]
        # sorted() is stable
        return sorted(selected, key=lambda c: c.order)
