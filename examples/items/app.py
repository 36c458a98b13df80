"""Items API: typed handlers, a route table, and panic recovery.

Every handler has the same shape::

    (ResponseSink, Request) -> tuple[T, Exception | None]

The route table is both what the app serves and what ``wallhack docs``
documents.

Run:
    cd examples/items
    wallhack run app:app

Document:
    cd examples/items
    wallhack docs app -o API.md
"""

from dataclasses import dataclass, field

from wallhack import App, Request, ResponseSink, Route, RouteTable


@dataclass
class Item:
    name: str = field(default="", metadata={"json": "Name"})
    value: int = field(default=0, metadata={"json": "Value"})
    value8: int = field(default=0, metadata={"json": "Value8"})
    value16: int = field(default=0, metadata={"json": "Value16"})
    value32: int = field(default=0, metadata={"json": "Value32"})
    value64: int = field(default=0, metadata={"json": "Value64"})
    flag: bool = field(default=False, metadata={"json": "Bool"})

    def example(self, method: str, url: str, func_name: str) -> "Item":
        if func_name == "get_item":
            return BOOP
        if func_name == "create_item":
            return Item(name="new", value=1)
        return self


BOOP = Item(name="boop", value=7, value8=8, value16=9, value32=10, value64=11, flag=True)


def get_item(response: ResponseSink, request: Request) -> tuple[Item, Exception | None]:
    """Return the sample item."""
    return BOOP, None


def create_item(response: ResponseSink, request: Request) -> tuple[Item, Exception | None]:
    """Create an item.

    Not implemented yet: always answers with an error envelope.
    """
    return Item(), RuntimeError("stuff went wrong: 2354")


def delete_item(response: ResponseSink, request: Request) -> tuple[Item, Exception | None]:
    """Delete an item. Fails unexpectedly; Recovery turns it into an envelope."""
    raise RuntimeError("NOPE")


async def find_item(response: ResponseSink, request: Request) -> tuple[Item | None, Exception | None]:
    """Look an item up by **name**."""
    name = request.path_params["name"]
    if name != BOOP.name:
        response.status = 404
        return None, LookupError(f"no item named {name!r}")
    return BOOP, None


# Routes of the items service.
URLS = RouteTable(
    Route("GET", "/items", get_item),
    Route("POST", "/items", create_item),
    Route("DELETE", "/items", delete_item),
    Route("GET", "/items/{name}", find_item),
)

app = App()
app.mount(URLS)

if __name__ == "__main__":
    app.run()
