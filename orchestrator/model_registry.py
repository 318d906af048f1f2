from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

PROVIDERS = ("together", "perplexity")


@dataclass(frozen=True)
class ModelSpec:
    id: str
    name: str
    provider: str
    api_model: str
    description: str = ""
    stop: list[str] = field(default_factory=list)
    prompt_template: str = "{prompt}"

    def format_prompt(self, prompt: str) -> str:
        return self.prompt_template.replace("{prompt}", prompt)

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "provider": self.provider,
        }


@dataclass
class ModelRegistry:
    _models: dict[str, ModelSpec]
    _aliases: dict[str, str]
    _default_model: str
    _generation_defaults: dict[str, Any]

    @classmethod
    def from_yaml(cls, path: str | None = None) -> "ModelRegistry":
        registry_path = Path(path) if path else Path(__file__).resolve().parent.parent / "config" / "models.yaml"
        if not registry_path.exists():
            raise ValueError(f"Model registry not found at {registry_path}")

        data = yaml.safe_load(registry_path.read_text(encoding="utf-8"))
        if not data or "models" not in data:
            raise ValueError("Invalid model registry: missing models")

        models: dict[str, ModelSpec] = {}
        for entry in data["models"]:
            required = ["id", "name", "provider", "api_model"]
            if any(key not in entry for key in required):
                raise ValueError(f"Missing required fields in model entry {entry.get('id', '?')}")
            provider = str(entry["provider"]).lower()
            if provider not in PROVIDERS:
                raise ValueError(f"Unsupported provider '{provider}' for model {entry['id']}")
            template = str(entry.get("prompt_template") or "{prompt}")
            if "{prompt}" not in template:
                raise ValueError(f"prompt_template for {entry['id']} has no {{prompt}} placeholder")
            model_id = str(entry["id"]).lower()
            models[model_id] = ModelSpec(
                id=model_id,
                name=str(entry["name"]),
                provider=provider,
                api_model=str(entry["api_model"]),
                description=str(entry.get("description", "")),
                stop=[str(s) for s in entry.get("stop") or []],
                prompt_template=template,
            )

        aliases = {str(k).lower(): str(v).lower() for k, v in (data.get("aliases") or {}).items()}
        for alias, target in aliases.items():
            if target not in models:
                raise ValueError(f"Alias '{alias}' points at unknown model '{target}'")

        default_model = str(data.get("default_model") or next(iter(models), "")).lower()
        if default_model not in models:
            raise ValueError(f"Default model '{default_model}' is not in the registry")

        return cls(
            _models=models,
            _aliases=aliases,
            _default_model=default_model,
            _generation_defaults=dict(data.get("generation_defaults") or {}),
        )

    @property
    def default_model(self) -> str:
        return self._default_model

    def generation_defaults(self) -> dict[str, Any]:
        return dict(self._generation_defaults)

    def normalize(self, model_id: str | None) -> str | None:
        """Resolve a model id or legacy alias; blank input means the default model."""
        key = (model_id or "").strip().lower()
        if not key:
            return self._default_model
        if key in self._models:
            return key
        return self._aliases.get(key)

    def get(self, model_id: str | None) -> ModelSpec | None:
        resolved = self.normalize(model_id)
        return self._models.get(resolved) if resolved else None

    def is_known(self, model_id: str | None) -> bool:
        return self.get(model_id) is not None

    def list_models(self) -> list[ModelSpec]:
        return list(self._models.values())


_registry: ModelRegistry | None = None


def get_model_registry() -> ModelRegistry:
    global _registry
    if _registry is None:
        _registry = ModelRegistry.from_yaml()
    return _registry
