"""Tests for the platform parameter files."""

from sogenactif import parmcom


class TestRender:
    def test_pathfile(self):
        text = parmcom.format_lines(
            parmcom.render_pathfile(False, "/media/", "/m/1/certif", "/m/1/parcom", "/m/1/parcom.sogenactif")
        )
        assert text == (
            "DEBUG!NO!\n"
            "D_LOGO!/media/!\n"
            "F_CERTIFICATE!/m/1/certif!\n"
            "F_CTYPE!php!\n"
            "F_PARAM!/m/1/parcom!\n"
            "F_DEFAULT!/m/1/parcom.sogenactif!\n"
        )

    def test_pathfile_debug(self):
        lines = parmcom.render_pathfile(True, "/media/", "a", "b", "c")
        assert lines[0] == ("DEBUG", "YES")

    def test_merchant_params(self):
        text = parmcom.format_lines(
            parmcom.render_merchant_params("http://h/cancel", "http://h/thanks")
        )
        assert text == "CANCEL_URL!http://h/cancel!\nRETURN_URL!http://h/thanks!\n"

    def test_merchant_params_with_auto_response_and_logo(self):
        lines = parmcom.render_merchant_params(
            "http://h/cancel", "http://h/thanks", "http://h/auto", logo="shop.png"
        )
        assert lines[0] == ("LOGO", "shop.png")
        assert lines[-1] == ("AUTO_REPONSE_URL", "http://h/auto")

    def test_platform_params(self):
        lines = dict(parmcom.render_platform_params("fr", "fr"))
        assert lines["CURRENCY"] == "978"
        assert lines["LANGUAGE"] == "fr"
        assert lines["MERCHANT_COUNTRY"] == "fr"
        assert lines["MERCHANT_LANGUAGE"] == "fr"
        assert lines["PAYMENT_MEANS"] == "CB,2,VISA,2,MASTERCARD,2,PAYLIB,2"
        assert lines["BLOCK_ORDER"] == "1,2,3,4,5,6,7,8"
        assert len(lines) == 14

    def test_platform_params_overrides(self):
        lines = dict(parmcom.render_platform_params("be", "nl", currency_code="840", payment_means="VISA,2"))
        assert lines["CURRENCY"] == "840"
        assert lines["LANGUAGE"] == "nl"
        assert lines["MERCHANT_COUNTRY"] == "be"
        assert lines["PAYMENT_MEANS"] == "VISA,2"


class TestWriteParamFile:
    def test_overwrites(self, tmp_path):
        target = tmp_path / "parcom.test"
        target.write_text("stale content that is much longer than the new one\n")

        parmcom.write_param_file(target, [("KEY", "value")])

        assert target.read_text() == "KEY!value!\n"
