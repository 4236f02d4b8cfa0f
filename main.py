import logging
import sys
from pathlib import Path
import webview
from bridge import Api
from img_engine.engine_config import LOG_LEVEL

def app_root() -> Path:
    """
    Retorna a raiz dos arquivos estáticos.
    - Em build PyInstaller one-file: usa a pasta temporária (sys._MEIPASS).
    - Em dev: usa a pasta onde está este arquivo.
    """
    meipass = getattr(sys, "_MEIPASS", None)  # evita aviso do type checker
    if meipass:
        return Path(meipass)
    return Path(__file__).resolve().parent

def main() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    root = app_root()
    index_uri = (root / "index.html").as_uri()

    api = Api()

    webview.create_window(
        title="Compressor de Imagens - Desktop",
        url=index_uri,
        width=1100,
        height=800,
        resizable=True,
        js_api=api,
    )
    webview.start(gui="edgechromium", debug=False)

if __name__ == "__main__":
    main()
