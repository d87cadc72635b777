"""Hello World -- the simplest zebar example.

Parse a template from a string and render it with provider data.

Run:
    python app.py
"""

from zebar import Environment

env = Environment()

# Parse once (cached by the environment)
template = env.from_string("CPU {{ cpu.usage }}% @if (cpu.usage > 80) {(hot)}")

# Render with bindings
output = template.render(cpu={"usage": 12})


def main() -> None:
    print(output)
    print()

    # Re-render whenever the provider pushes new data
    for usage in [35, 81.5, 97]:
        print(template.render(cpu={"usage": usage}))


if __name__ == "__main__":
    main()
