import base64
import io
import qrcode

def gerar_qrcode_data_url(conteudo: str) -> str:
    """Gera um PNG do QR Code e retorna como data URL base64"""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(conteudo)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    img_buffer = io.BytesIO()
    img.save(img_buffer, format='PNG')
    img_base64 = base64.b64encode(img_buffer.getvalue()).decode()
    return f"data:image/png;base64,{img_base64}"
