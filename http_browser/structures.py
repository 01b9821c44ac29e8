from typing import List, Optional

from requests.structures import CaseInsensitiveDict


class HttpValuesMap(CaseInsensitiveDict):
    """Case-insensitive, insertion-ordered mapping of a name to a list of values.

    Lookups ignore case. ``add`` and ``set`` keep the spelling a name was
    first stored with, and that spelling is what gets sent over the wire;
    item assignment replaces it::

        headers = HttpValuesMap()
        headers.add("Accept", "text/html")
        headers.add("accept", "application/json")
        headers["ACCEPT"]  # ['text/html', 'application/json']
    """

    def __setitem__(self, key: str, value) -> None:
        if isinstance(value, (str, bytes)):
            value = [value]
        super().__setitem__(key, list(value))

    def add(self, name: str, value: str) -> None:
        if name in self:
            self[name].append(value)
        else:
            self[name] = [value]

    def set(self, name: str, value: str) -> None:
        if name in self:
            self[name][:] = [value]
        else:
            self[name] = [value]

    def first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        values = self.get(name)
        if not values:
            return default
        return values[0]

    def get_all(self, name: str) -> Optional[List[str]]:
        values = self.get(name)
        if values is None:
            return None
        return list(values)

    def flatten(self, separator: str = ", ") -> CaseInsensitiveDict:
        """One value per name, repeated values joined with ``separator``."""
        return CaseInsensitiveDict(
            (name, separator.join(values)) for name, values in self.items()
        )
