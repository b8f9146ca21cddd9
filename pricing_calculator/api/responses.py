"""JSON responses that write Decimal values as exact JSON numbers."""
from typing import Any

import simplejson
from fastapi.responses import JSONResponse


class DecimalJSONResponse(JSONResponse):
    """JSON response keeping every digit of Decimal values.

    ``Decimal("5.40")`` is rendered as the number ``5.40``, never as a
    string and never through a float.
    """

    def render(self, content: Any) -> bytes:
        return simplejson.dumps(
            content,
            use_decimal=True,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")
