import base64

VIZ_BASE_URL = "https://deflate-viz.pages.dev"

OSC = "\x1b]8;;"
BEL = "\x07"


def signed_str(x: int):
  return f"+{x}" if 0 <= x else str(x)

def openable_uri(title: str, uri: str):
  return f"{OSC}{uri}{BEL}{title}{OSC}{BEL}"

def _b64_param(data: bytes):
  return base64.b64encode(data).decode().replace('+', '%2B').replace('/', '%2F').replace('=', '%3D')

def viz_plane_url(plane: bytes):
  return f"{VIZ_BASE_URL}?text={_b64_param(plane)}"

def viz_deflate_url(deflate: bytes):
  return f"{VIZ_BASE_URL}?deflate={_b64_param(deflate)}"

def printable_bytes(data: bytes, limit: int = 40):
  """repr-like rendering of decoded bytes for one-line item descriptions"""
  text = data[:limit].decode("latin-1").encode("unicode_escape").decode("ascii").replace('"', '\\"')
  return f'"{text}"' + ("..." if len(data) > limit else "")
