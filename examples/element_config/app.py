"""Element config -- every string property of an element is a template.

Before a window's config is validated, each string in it is rendered
against the element's bindings. Errors name the failing property.

Run:
    python app.py
"""

from zebar import TemplatePropertyError, render_properties

config = {
    "template": "{{ weather?.celsiusTemp ?? '--' }}°C",
    "class": "@switch (weather?.status) { @case ('clear_day') {sunny} @default {cloudy} }",
    "styles": {
        "color": "@if ((weather?.celsiusTemp ?? 0) > 25) {orange} @else {white}",
        "opacity": 0.9,
    },
}

sunny = render_properties(
    config,
    {"weather": {"celsiusTemp": 28, "status": "clear_day"}},
    element_id="weather",
)
offline = render_properties(config, {"weather": None}, element_id="weather")

broken_config = {"styles": {"color": "@if (weather.celsiusTemp > 25 {orange}"}}

error: TemplatePropertyError | None = None
try:
    render_properties(broken_config, {"weather": None})
except TemplatePropertyError as e:
    error = e


def main() -> None:
    print(sunny)
    print(offline)
    print()
    if error is not None:
        print(error.format_compact())


if __name__ == "__main__":
    main()
