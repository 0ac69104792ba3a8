import base64
from io import BytesIO

import qrcode


def build_qr_code_data_uri(pix_code: str) -> str:
    """
    Gera a imagem do QR Code (PNG em data URI) a partir do código PIX copia e cola.
    Usado quando o gateway devolve só o código, sem a imagem.
    """
    img = qrcode.make(pix_code)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return f"data:image/png;base64,{base64.b64encode(buf.getvalue()).decode()}"
