"""Example archive users can download, edit and upload back."""

import base64
import io
import json
import zipfile

# 1x1 PNG used as placeholder media
_PLACEHOLDER_IMAGE = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)

TEMPLATE_MANIFEST = {
    "title": "Giro delle Dolomiti - Esempio",
    "summary": (
        "Un viaggio di esempio attraverso le meravigliose Dolomiti, "
        "perfetto per testare il sistema di caricamento batch."
    ),
    "destination": "Dolomiti, Trentino-Alto Adige",
    "theme": "Montagna e natura",
    "characteristics": ["Curve strette", "Bel paesaggio", "Interesse storico-culturale"],
    "recommended_seasons": ["Estate", "Autunno"],
    "tags": ["dolomiti", "montagna", "esempio"],
    "travelDate": "2024-07-15",
    "stages": [
        {
            "title": "Bolzano - Ortisei",
            "description": "Prima tappa attraverso la Val Gardena con panorami mozzafiato.",
            "routeType": "Strada statale",
            "duration": "2 ore",
        },
        {
            "title": "Ortisei - Cortina d'Ampezzo",
            "description": "Seconda tappa verso la regina delle Dolomiti.",
            "routeType": "Strada statale e provinciale",
            "duration": "1.5 ore",
        },
    ],
}

_POINTS = {
    "Bolzano": (46.4983, 11.3548, 262),
    "Ortisei": (46.5784, 11.6751, 1236),
    "Cortina d'Ampezzo": (46.5369, 12.1389, 1224),
}

README = """# Batch upload template

Files
- viaggi.json: trip metadata (required)
- main.gpx: main GPX track (optional)

Folders
- media/: trip images and videos; the first image becomes the hero image
- tappe/: one numbered folder per stage (01-, 02-, 03-, ...), each with
  tappa.gpx and its own media/ folder

Seasons: Primavera, Estate, Autunno, Inverno
Characteristics: Strade sterrate, Curve strette, Presenza pedaggi,
Presenza traghetti, Autostrada, Bel paesaggio, Visita prolungata,
Interesse gastronomico, Interesse storico-culturale

Supported media: JPG, JPEG, PNG, WEBP images; MP4, MOV videos.
Several trips can be uploaded at once with {"viaggi": [...]} and one
numbered folder per trip (01-trip-name/, 02-trip-name/).
"""


def _gpx(name: str, stops: list[str]) -> str:
    trkpts = []
    for stop in stops:
        lat, lon, ele = _POINTS[stop]
        trkpts.append(
            f'      <trkpt lat="{lat}" lon="{lon}">\n'
            f"        <ele>{ele}</ele>\n"
            f"        <name>{stop}</name>\n"
            f"      </trkpt>"
        )
    points = "\n".join(trkpts)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="tripbatch template" '
        'xmlns="http://www.topografix.com/GPX/1/1">\n'
        f"  <metadata>\n    <name>{name}</name>\n  </metadata>\n"
        f"  <trk>\n    <name>{name}</name>\n    <trkseg>\n{points}\n    </trkseg>\n  </trk>\n"
        "</gpx>\n"
    )


def build_template_archive() -> bytes:
    """Return a ZIP with a complete single-trip example."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("viaggi.json", json.dumps(TEMPLATE_MANIFEST, indent=2, ensure_ascii=False))
        zf.writestr("main.gpx", _gpx("Giro delle Dolomiti", ["Bolzano", "Ortisei", "Cortina d'Ampezzo"]))
        zf.writestr("media/hero-example.png", _PLACEHOLDER_IMAGE)
        zf.writestr("media/README.txt", "Trip images and videos. The first image is the hero.\n")

        stages = [
            ("01-bolzano-ortisei", ["Bolzano", "Ortisei"]),
            ("02-ortisei-cortina", ["Ortisei", "Cortina d'Ampezzo"]),
        ]
        for n, (folder, stops) in enumerate(stages, start=1):
            zf.writestr(f"tappe/{folder}/tappa.gpx", _gpx(" - ".join(stops), stops))
            zf.writestr(f"tappe/{folder}/media/stage{n}-photo.png", _PLACEHOLDER_IMAGE)
            zf.writestr(f"tappe/{folder}/media/README.txt", f"Photos and videos for stage {n}.\n")

        zf.writestr("README.txt", README)
    return buf.getvalue()
