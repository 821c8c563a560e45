from __future__ import annotations

from typing import Mapping

import httpx

OFFLINE_SHEET_ID = "offline"

_OFFLINE_POSTS = """\
id,username,userAvatar,contentUrl,contentType,caption,likes,timestamp,location
p1,wanderlust_ana,avatar_ana,lisbon_tram,image,"Riding the 28 through Alfama, best way to see the hills",1289,2024-05-02 09:15:00,"Lisbon, Portugal"
p2,kai.outdoors,avatar_kai,fjord_clip,video,"Morning kayak on the fjord. He said ""worth it"" and he was right",842,2024-05-04 18:40:00,Geiranger
p3,mira_eats,,ramen_stall,image,Late night ramen after a long flight,n/a,5/6/2024 22:05:00,Osaka
p4,nomad_lee,avatar_lee,,,Lost the photo but not the memory,57,,
"""

_OFFLINE_COMMENTS = """\
id,postId,username,text,timestamp
c1,p1,kai.outdoors,Need to go back!,2024-05-02 10:00:00
c2,p1,mira_eats,"Those hills, though",2024-05-03 08:30:00
c3,p2,wanderlust_ana,Stunning water,2024-05-05 07:12:00
c4,p3,nomad_lee,Which stall is this?,2024-05-07 12:00:00
c5,p3,kai.outdoors,Adding it to my list,2024-05-06 23:10:00
"""


def _default_tables() -> dict[str, str]:
    tables: dict[str, str] = {}
    for n in range(1, 5):
        tables[f"Posts{n}"] = _OFFLINE_POSTS
        tables[f"Comments{n}"] = _OFFLINE_COMMENTS
    return tables


class OfflineSheetTransport(httpx.MockTransport):
    """
    Network-free transport serving canned CSV tables by sheet name.

    Unknown sheet names answer 404, which the fetcher reports as a failed load.
    """

    def __init__(self, tables: Mapping[str, str] | None = None) -> None:
        self.tables: dict[str, str] = dict(_default_tables() if tables is None else tables)
        self.requested: list[str] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        sheet_name = request.url.params.get("sheet", "")
        self.requested.append(sheet_name)

        body = self.tables.get(sheet_name)
        if body is None:
            return httpx.Response(404, text=f"No sheet named {sheet_name}")
        return httpx.Response(200, text=body, headers={"content-type": "text/csv"})
