from __future__ import annotations

from html import escape

from menu_admin.board import MenuBoard
from menu_admin.store.base import MenuItem

SORTABLE_COLUMNS: list[tuple[str, str]] = [
    ("name", "Name"),
    ("category", "Category"),
    ("price", "Price ($)"),
    ("cost", "Cost ($)"),
    ("stock", "Stock"),
]

STYLE = """
  body{font-family:system-ui;margin:24px;background:#1f1f1f;color:#fff}
  main{max-width:1200px;margin:auto;background:#2b2b2b;border-radius:12px;padding:20px}
  table{border-collapse:collapse;width:100%;background:#fff;color:#000}
  td,th{border:1px solid #ddd;padding:8px;font-size:14px;text-align:left}
  th button{background:none;border:none;font-weight:bold;cursor:pointer}
  .indicator{display:inline-block;margin-left:0.5rem}
  .btn{padding:6px 12px;border:none;border-radius:6px;color:#fff;background:#1976d2;cursor:pointer}
  .btn.add{background:#4caf50}
  .btn.delete{background:#f44336}
  .dialog{background:#fff;color:#000;border-radius:8px;padding:16px;margin-bottom:16px}
  .error{color:red}
  form.inline{display:inline}
"""


def format_money(value: float | None) -> str:
    return f"${(value or 0):.2f}"


def _row(item: MenuItem) -> str:
    item_id = escape(item.id or "")
    return (
        "<tr>"
        f"<td>{escape(item.name)}</td>"
        f"<td>{escape(item.category)}</td>"
        f"<td>{escape(item.options or '-')}</td>"
        f"<td>{format_money(item.price)}</td>"
        f"<td>{format_money(item.cost)}</td>"
        f"<td>{item.stock}</td>"
        "<td>"
        f"<form class='inline' method='post' action='/ui/items/{item_id}/edit'>"
        "<button class='btn' type='submit'>Edit</button></form> "
        f"<form class='inline' method='post' action='/ui/items/{item_id}/delete'>"
        "<button class='btn delete' type='submit'>Delete</button></form>"
        "</td>"
        "</tr>"
    )


def _header(board: MenuBoard) -> str:
    cells = []
    for key, label in SORTABLE_COLUMNS:
        indicator = board.projection.indicator_for(key)
        cells.append(
            "<th>"
            f"<form class='inline' method='post' action='/ui/sort/{key}'>"
            f"<button type='submit'>{label}<span class='indicator'>{indicator}</span></button>"
            "</form></th>"
        )
    cells.insert(2, "<th>Options</th>")
    cells.append("<th>Actions</th>")
    return f"<tr>{''.join(cells)}</tr>"


def _field(name: str, label: str, value: object, input_type: str = "text", required: bool = True) -> str:
    shown = "" if value is None else escape(str(value))
    extra = " required" if required else ""
    step = " step='any'" if input_type == "number" and name != "stock" else ""
    return (
        f"<p><label>{label} <input name='{name}' type='{input_type}' value='{shown}'{step}{extra}>"
        "</label></p>"
    )


def _item_dialog(board: MenuBoard) -> str:
    form = board.form
    if not form.open:
        return ""
    item = form.selected_item
    error = f"<p class='error'>{escape(form.validation_error)}</p>" if form.validation_error else ""
    submit_label = "Update Item" if item else "Add Item"
    return (
        "<div class='dialog'>"
        f"<h3>{form.title}</h3>"
        "<form method='post' action='/ui/form'>"
        + _field("name", "Name", item.name if item else None)
        + _field("category", "Category", item.category if item else None)
        + _field("options", "Options", item.options if item else None, required=False)
        + _field("price", "Price", item.price if item else None, "number")
        + _field("cost", "Cost", item.cost if item else None, "number")
        + error
        + _field("stock", "Stock", item.stock if item else 0, "number")
        + f"<button class='btn' type='submit'>{submit_label}</button>"
        "</form>"
        "<form method='post' action='/ui/form/close'>"
        "<button class='btn' type='submit'>Cancel</button></form>"
        "</div>"
    )


def _delete_dialog(board: MenuBoard) -> str:
    if not board.deletion.open:
        return ""
    return (
        "<div class='dialog'>"
        "<h3>Delete Item</h3>"
        "<p>Are you sure you want to delete this item?</p>"
        "<form class='inline' method='post' action='/ui/delete/cancel'>"
        "<button class='btn' type='submit'>Cancel</button></form> "
        "<form class='inline' method='post' action='/ui/delete/confirm'>"
        "<button class='btn delete' type='submit'>Delete</button></form>"
        "</div>"
    )


def render_menu_page(board: MenuBoard) -> str:
    rows = "".join(_row(item) for item in board.projection.items)
    return f"""
    <html><head><meta charset="utf-8"><title>Menu</title>
    <style>{STYLE}</style></head>
    <body><main>
      <h2>Menu</h2>
      <form method="post" action="/ui/form/open">
        <button class="btn add" type="submit">Add New Item</button>
      </form>
      {_item_dialog(board)}
      {_delete_dialog(board)}
      <table>
        <thead>{_header(board)}</thead>
        <tbody>{rows}</tbody>
      </table>
    </main></body></html>
    """
