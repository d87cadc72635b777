"""Loop context -- loop.first, loop.last, loop.index, loop.length.

Renders the window manager's workspaces as a button row, using the loop
variable to mark the first and last buttons and number each one.

Run:
    python app.py
"""

from zebar import Environment

env = Environment()

template = env.from_string(
    """\
@for (ws, i of glazewm.workspaces) {
<button data-index="{{ i }}" class="ws @if (loop.first) {first} @if (loop.last) {last} @if (ws.hasFocus) {focused}">{{ loop.index }}/{{ loop.length }} {{ ws.name }}</button>
}""",
    name="workspaces",
)

workspaces = [
    {"name": "web", "hasFocus": False},
    {"name": "code", "hasFocus": True},
    {"name": "chat", "hasFocus": False},
    {"name": "music", "hasFocus": False},
]
output = template.render(glazewm={"workspaces": workspaces})


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
