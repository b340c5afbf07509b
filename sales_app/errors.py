"""納品書PDF生成のエラー定義"""


class DeliveryNoteError(Exception):
    """納品書PDF生成処理の基底例外"""

    code = "DeliveryNoteError"
    default_message = "納品書の生成に失敗しました"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)


class InvalidRequestError(DeliveryNoteError):
    """リクエスト内容の不備（HTTP 400）"""

    code = "InvalidRequest"
    default_message = "リクエストが不正です"


class MissingItemsError(InvalidRequestError):
    code = "MissingItems"
    default_message = "No delivery data provided"


class MissingCompanyInfoError(InvalidRequestError):
    code = "MissingCompanyInfo"
    default_message = "Company info not provided"


class MissingCustomerInfoError(InvalidRequestError):
    code = "MissingCustomerInfo"
    default_message = "Customer info not provided"


class RenderError(DeliveryNoteError):
    """ページ描画の失敗（HTTP 500）"""

    code = "RenderError"
    default_message = "Error generating PDF page"


class AssemblyError(DeliveryNoteError):
    """ページ結合の失敗（HTTP 500）"""

    code = "AssemblyError"
    default_message = "Error merging PDF pages"


class FontInitError(DeliveryNoteError):
    """フォント初期化の失敗（起動時エラー、HTTP 503）"""

    code = "FontInitError"
    default_message = "Failed to load font for PDF generation"
