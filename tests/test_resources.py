"""Tests for resource definitions, the registry, and scenario parsing."""

import pytest

from econsim.core.errors import ConfigurationError
from econsim.core.resources import (
    Recipe,
    RecipeInput,
    ResourceCategory,
    ResourceDefinition,
    ResourceRegistry,
)
from econsim.core.scenario import RegionSpec, Scenario


def _region(**overrides) -> dict:
    d = {"name": "A", "wealth": 100, "production": 50, "labor": 100}
    d.update(overrides)
    return d


def _scenario_dict(**overrides) -> dict:
    d = {
        "resources": [
            {"name": "Food", "essential": True},
            {
                "name": "Bread", "category": "processed",
                "recipes": [{
                    "name": "bake",
                    "inputs": [{"resource": "Food", "amount": 2}],
                    "output_amount": 3,
                }],
            },
        ],
        "regions": [_region()],
    }
    d.update(overrides)
    return d


class TestResourceDefinition:
    def test_from_dict(self):
        d = ResourceDefinition.from_dict({
            "name": "Iron", "category": "raw", "base_value": 15,
            "perish_rate": 0.0, "transport_factor": 0.8,
        })
        assert d.name == "Iron"
        assert d.category is ResourceCategory.RAW
        assert d.base_value == 15.0
        assert d.transport_factor == 0.8
        assert d.recipes == ()

    def test_recipe_output_defaults_to_owner(self):
        d = ResourceDefinition.from_dict({
            "name": "Bread",
            "recipes": [{"name": "bake", "inputs": [{"resource": "Food", "amount": 1}]}],
        })
        assert d.recipes[0].output == "Bread"
        assert d.recipes[0].inputs[0].consumed is True

    def test_null_definition_rejected(self):
        with pytest.raises(ConfigurationError):
            ResourceDefinition.from_dict(None)

    def test_unknown_category_rejected(self):
        with pytest.raises(ConfigurationError):
            ResourceDefinition.from_dict({"name": "X", "category": "luxury"})

    def test_frozen(self):
        d = ResourceDefinition("Food")
        with pytest.raises(AttributeError):
            d.base_value = 3.0


class TestRegistry:
    def test_lookup(self):
        reg = ResourceRegistry([ResourceDefinition("Food"), ResourceDefinition("Iron")])
        assert reg.names == ["Food", "Iron"]
        assert "Food" in reg
        assert reg.get("Gold") is None
        assert len(reg) == 2

    def test_duplicate_rejected(self):
        with pytest.raises(ConfigurationError):
            ResourceRegistry([ResourceDefinition("Food"), ResourceDefinition("Food")])

    def test_empty_rejected(self):
        with pytest.raises(ConfigurationError):
            ResourceRegistry([])

    def test_recipe_with_unknown_input_rejected(self):
        recipe = Recipe(name="r", output="Bread", inputs=(RecipeInput("Flour", 1.0),))
        with pytest.raises(ConfigurationError):
            ResourceRegistry([ResourceDefinition("Bread", recipes=(recipe,))])

    def test_bad_transport_factor_rejected(self):
        with pytest.raises(ConfigurationError):
            ResourceRegistry([ResourceDefinition("Food", transport_factor=3.0)])

    def test_essential_and_recipes(self):
        recipe = Recipe(name="bake", output="Bread", inputs=(RecipeInput("Food", 1.0),))
        reg = ResourceRegistry([
            ResourceDefinition("Food", essential=True),
            ResourceDefinition("Bread", recipes=(recipe,)),
        ])
        assert [d.name for d in reg.essential] == ["Food"]
        assert reg.get_recipe("bake") is recipe


class TestScenario:
    def test_from_dict(self):
        s = Scenario.from_dict(_scenario_dict())
        assert [r.name for r in s.resources] == ["Food", "Bread"]
        assert s.regions[0].infrastructure_level == 1
        assert s.adjacency is None
        reg = s.build_registry()
        assert reg.get_recipe("bake").output_amount == 3.0

    @pytest.mark.parametrize("data", [
        None,
        {},
        {"resources": [], "regions": [_region()]},
        {"resources": [{"name": "Food"}], "regions": []},
        {"resources": [{"name": "Food"}], "regions": [None]},
        {"resources": [{"name": "Food"}], "regions": [_region(wealth=None)]},
    ])
    def test_missing_data_rejected(self, data):
        with pytest.raises(ConfigurationError):
            Scenario.from_dict(data)

    def test_unknown_resource_in_region_rejected(self):
        s = Scenario.from_dict(_scenario_dict(
            regions=[_region(base_production={"Fodo": 5})],
        ))
        with pytest.raises(ConfigurationError, match="Fodo"):
            s.build_registry()

    def test_unknown_recipe_in_region_rejected(self):
        s = Scenario.from_dict(_scenario_dict(regions=[_region(active_recipes=["brew"])]))
        with pytest.raises(ConfigurationError):
            s.build_registry()

    def test_duplicate_region_rejected(self):
        s = Scenario.from_dict(_scenario_dict(regions=[_region(), _region()]))
        with pytest.raises(ConfigurationError):
            s.build_registry()

    def test_zero_infrastructure_rejected(self):
        s = Scenario.from_dict(_scenario_dict(regions=[_region(infrastructure_level=0)]))
        with pytest.raises(ConfigurationError):
            s.build_registry()

    def test_adjacency_unknown_region_rejected(self):
        s = Scenario.from_dict(_scenario_dict(adjacency={"A": ["Z"]}))
        with pytest.raises(ConfigurationError):
            s.build_registry()

    def test_position_parsed(self):
        spec = RegionSpec.from_dict(_region(position=[1, 2]))
        assert spec.position == (1.0, 2.0)

    @pytest.mark.parametrize("data", [
        _scenario_dict(resources=[{
            "name": "Bread", "recipes": [{"name": "bake", "inputs": [{"amount": 2}]}],
        }]),
        _scenario_dict(resources=[{"name": "Bread", "recipes": [None]}]),
        _scenario_dict(resources=[{"name": "Food", "base_value": "cheap"}]),
        _scenario_dict(regions=[_region(wealth="lots")]),
        _scenario_dict(regions=[_region(position=[1, "north"])]),
        _scenario_dict(regions=[_region(initial_resources={"Food": "plenty"})]),
        _scenario_dict(adjacency=["A"]),
        _scenario_dict(regions=5),
    ])
    def test_malformed_data_rejected(self, data):
        with pytest.raises(ConfigurationError):
            Scenario.from_dict(data)


class TestRecipeLookup:
    def test_require_recipe(self):
        reg = Scenario.from_dict(_scenario_dict()).build_registry()
        assert reg.require_recipe("bake").output == "Bread"
        with pytest.raises(ConfigurationError, match="brew"):
            reg.require_recipe("brew")
