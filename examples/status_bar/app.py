"""Status bar -- opaque bindings come back as the objects you bound.

A bar template mixes provider data with host callbacks and embedded
components. Callbacks are never called or stringified by the engine: they
render as ``{{ name }}`` markers in the text, and ``render_markup().parts``
hands back the bound objects for the host to wire up.

Run:
    python app.py
"""

from zebar import BindingsContext, Environment


def toggle_tiling_direction() -> str:
    return "toggled"


class Clock:
    """Stand-in for an embedded UI component."""

    def __repr__(self) -> str:
        return "<Clock>"


clock = Clock()

env = Environment()

template = env.from_string(
    """\
<div class="left">
  <button onclick="{{ toggle }}">{{ glazewm.tilingDirection === 'horizontal' ? '⇆' : '⇅' }}</button>
</div>
<div class="right">
  {{ clock }}{{ separator }}@if (battery) {{{ battery.chargePercent }}%@if (battery.isCharging) { ⚡}} @else {AC}
</div>""",
    name="bar",
)

bindings = BindingsContext.from_parts(
    {
        "glazewm": {"tilingDirection": "horizontal"},
        "battery": {"chargePercent": 87, "isCharging": True},
    },
    strings={"separator": " | "},
    functions={"toggle": toggle_tiling_direction},
    components={"clock": clock},
)

markup = template.render_markup(bindings)
output = markup.text


def main() -> None:
    print(output)
    print()
    for name, obj in markup.references():
        print(f"{name} -> {obj!r}")


if __name__ == "__main__":
    main()
