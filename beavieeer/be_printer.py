"""
A pretty-printer for Beavieeer values.
"""
from beavieeer.be_datatypes import (
    Integer, String, Boolean, Null, Array, Hash, Function, Builtin, Error, ReturnValue,
)


class Printer:
    """Formats Beavieeer values the way the REPL shows them."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format a value as source-like text."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            return repr(obj)
        return handler(obj)

    def pstr(self, obj) -> str:
        """Formats a value for output: strings print bare, everything else as pformat."""
        if isinstance(obj, String):
            return obj.value
        return self.pformat(obj)

    def _create_handlers(self):
        return {
            Integer: self._pformat_primitive,
            String: self._pformat_str,
            Boolean: self._pformat_bool,
            Null: self._pformat_null,
            Array: self._pformat_array,
            Hash: self._pformat_hash,
            Function: self._pformat_function,
            Builtin: self._pformat_builtin,
            Error: self._pformat_error,
            ReturnValue: self._pformat_return,
        }

    def _pformat_primitive(self, obj):
        return str(obj.value)

    def _pformat_str(self, obj):
        escaped = obj.value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n').replace('\t', '\\t')
        return f'"{escaped}"'

    def _pformat_bool(self, obj):
        return 'true' if obj.value else 'false'

    def _pformat_null(self, obj):
        return 'null'

    def _pformat_array(self, obj):
        return '[' + ', '.join(self.pformat(e) for e in obj.elements) + ']'

    def _pformat_hash(self, obj):
        items = (f'{self.pformat(p.key)}: {self.pformat(p.value)}' for p in obj.pairs.values())
        return '{' + ', '.join(items) + '}'

    def _pformat_function(self, obj):
        params = ', '.join(p.name for p in obj.parameters)
        return f'fun({params}) {obj.body}'

    def _pformat_builtin(self, obj):
        return f'<builtin {obj.name}>'

    def _pformat_error(self, obj):
        return f'ERROR: {obj.message}'

    def _pformat_return(self, obj):
        return self.pformat(obj.value)
