#LN Import the tool that reads options typed on the command line
import argparse
#LN Import the tool that escapes text before we put it inside HTML
import html
#LN Import the tool that records what the server is doing
import logging
#LN Import exact decimal numbers so money never gets rounded wrongly
from decimal import Decimal, InvalidOperation
#LN Import the tool that checks whether folders exist
from pathlib import Path
#LN Import the marker for values that may be missing
from typing import Optional

#LN Import the tools to build the API server, read form posts and handle web errors
from fastapi import FastAPI, Form, HTTPException, Query
#LN Import the response types for HTML pages and plain text
from fastapi.responses import HTMLResponse, PlainTextResponse
#LN Import the tool that serves files (credit card logos) from a folder
from fastapi.staticfiles import StaticFiles
#LN Import the tool that checks if data sent to us is in the correct format
from pydantic import BaseModel, Field

#LN Import the Sogenactif payment platform wrapper
from sogenactif import (
    CheckoutForm,
    Config,
    ConfigError,
    Customer,
    SetupError,
    Sogen,
    SogenError,
    load_config,
    new_transaction,
)
#LN Import the maximum size of the free "caddie" field
from sogenactif.models import CADDIE_MAX_LENGTH

#LN Create the logger used by the web server
logger = logging.getLogger(__name__)

#LN Store the port the demo server listens on by default
DEFAULT_PORT = 6060
#LN Store the amount charged by the demo checkout page by default
DEFAULT_AMOUNT = Decimal("1.00")


#LN Define a blueprint for the data we expect users to send us
class CheckoutRequest(BaseModel):
    #LN Expect a positive number (decimal) for the price
    amount: Decimal = Field(gt=0)
    #LN Accept an optional customer reference, sent back by the bank
    customer_id: str = ""
    #LN Accept a free text field sent back unmodified after payment
    caddie: str = Field(default="", max_length=CADDIE_MAX_LENGTH)
    #LN Accept optional per-customer return and cancel addresses
    return_url: Optional[str] = None
    cancel_url: Optional[str] = None


#LN Wrap a piece of HTML inside a full page
def _page(body: str) -> str:
    return f"<html><body>{body}</body></html>"


#LN Define a function that builds the whole web application for one merchant
def create_app(config: Config, amount=DEFAULT_AMOUNT, sogen: Optional[Sogen] = None) -> FastAPI:
    """Build the checkout application.

    Creating the app writes the platform files for the merchant, so a bad
    configuration fails here and not on the first request.
    """
    #LN Refuse a cancel address that would hide the checkout page at the site root
    if config.cancel_path == "/":
        raise SetupError("cancel_url path must not be / (the checkout page is served there)")
    #LN Set up the platform files and binaries (or reuse the ones given)
    sogen = sogen or Sogen(config)
    #LN Create the main application object for our web server
    app = FastAPI(title="Sogenactif checkout")
    #LN Keep the platform object around for the request handlers
    app.state.sogen = sogen

    #LN Define a helper that runs the checkout and turns failures into web errors
    def _checkout(customer: Customer, value) -> CheckoutForm:
        #LN Build the transaction from the customer and the price
        transaction = new_transaction(customer, value)
        #LN Refuse a checkout without a price
        if transaction is None:
            raise HTTPException(status_code=400, detail="a transaction needs a customer and a non-zero amount")
        #LN Start a block of code where we watch for potential errors
        try:
            #LN Ask the request binary for the form that sends the buyer to the bank
            return sogen.checkout(transaction)
        #LN Catch any errors reported by the payment binaries
        except SogenError as e:
            #LN Record the failure and send a "Server Error" message to the user
            logger.error("checkout failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e))

    #LN Tell the server to show the checkout page at the site root
    @app.get("/", response_class=HTMLResponse)
    #LN Define the function that shows credit card logos and the payment link
    def checkout_page(customer_id: str = "demo", caddie: str = Query("", max_length=CADDIE_MAX_LENGTH)):
        #LN Build the page around the form returned by the platform
        return _page(str(_checkout(Customer(id=customer_id, caddie=caddie), amount)))

    #LN Tell the server to listen for POST messages at this specific address
    @app.post("/initiate-sogenactif")
    #LN Define the function that runs when a payment request comes in
    def initiate_payment(payment: CheckoutRequest):
        #LN Copy the customer details from the request
        customer = Customer(
            id=payment.customer_id,
            caddie=payment.caddie,
            return_url=payment.return_url,
            cancel_url=payment.cancel_url,
        )
        #LN Ask the request binary for the redirect form
        form = _checkout(customer, payment.amount)
        #LN Send the success message and the payment form back to the user
        return {
            "status": "success",
            "payment_service": "Sogenactif",
            "form": form.html,
            "debug": form.debug,
        }

    #LN Define the function that runs when the buyer comes back after paying
    def payment_return(data: str = Form(..., alias="DATA")):
        #LN Start a block of code where we watch for potential errors
        try:
            #LN Ask the response binary to decode the bank's message
            payment = sogen.handle_payment(data)
        #LN Catch any errors reported by the payment binaries
        except SogenError as e:
            #LN Record the failure and send a "Server Error" message to the buyer
            logger.error("payment handling failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e))
        #LN Thank the buyer and show the payment details
        return _page(f"<h2>Thank you!</h2><pre>{html.escape(payment.report())}</pre>")

    #LN Define the function that runs when the buyer cancels the payment
    def payment_cancel():
        #LN Tell the buyer nothing was charged
        return _page("<h2>The transaction has been cancelled.</h2>")

    #LN Define the function the bank calls directly to confirm a payment
    def payment_notification(data: str = Form(..., alias="DATA")):
        #LN Start a block of code where we watch for potential errors
        try:
            #LN Ask the response binary to decode the bank's message
            payment = sogen.handle_payment(data)
        #LN Catch any errors reported by the payment binaries
        except SogenError as e:
            #LN Record the rejection and tell the bank something went wrong
            logger.error("automatic response rejected: %s", e)
            raise HTTPException(status_code=500, detail=str(e))
        #LN Record the outcome since nobody is looking at this page
        logger.info("automatic response: transaction %s accepted=%s", payment.transaction_id, payment.accepted)
        #LN Acknowledge the notification
        return "OK"

    #LN Listen at the return address written in the merchant parameters
    app.add_api_route(config.return_path, payment_return, methods=["POST"], response_class=HTMLResponse)
    #LN Listen at the cancel address written in the merchant parameters
    app.add_api_route(config.cancel_path, payment_cancel, methods=["GET", "POST"], response_class=HTMLResponse)
    #LN Listen for the bank's automatic response only if one is configured
    if config.auto_response_path:
        app.add_api_route(
            config.auto_response_path, payment_notification, methods=["POST"], response_class=PlainTextResponse
        )

    #LN Serve the credit card logos if the media folder exists
    mount_point = config.logo_path.rstrip("/")
    if mount_point and Path(config.media_path).is_dir():
        app.mount(mount_point, StaticFiles(directory=config.media_path), name="media")

    #LN Hand the finished application back
    return app


#LN Check that an amount typed on the command line is a valid price
def _amount(value: str) -> Decimal:
    #LN Try to read the text as an exact decimal number
    try:
        parsed = Decimal(value)
    #LN Catch text that is not a number at all
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    #LN Refuse infinite, missing or non-positive prices
    if not parsed.is_finite() or parsed <= 0:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    #LN Hand the valid price back
    return parsed


#LN Define the command that starts the demo server
def main(argv=None):
    #LN Describe the options the command accepts
    parser = argparse.ArgumentParser(description="Sogenactif checkout demo server")
    parser.add_argument("settings", help="settings file (INI, [sogenactif] section)")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT, help="http server listening port")
    parser.add_argument("-t", "--amount", type=_amount, default=DEFAULT_AMOUNT, help="transaction amount")
    #LN Read the options typed by the user
    args = parser.parse_args(argv)

    #LN Read the merchant settings, stop with a message if they are broken
    try:
        #LN Load and check the settings file
        config = load_config(args.settings)
    #LN Catch a broken or missing settings file
    except ConfigError as e:
        #LN Stop with the reason
        parser.exit(1, f"config file error: {e}\n")

    #LN Show debug messages only when the settings ask for them
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    #LN Build the application, stop with a message if the platform files are missing
    try:
        #LN Write the platform files and build the web server
        app = create_app(config, amount=args.amount)
    #LN Catch missing binaries, certificates or merchant folders
    except SetupError as e:
        #LN Stop with the reason
        parser.exit(1, f"{e}\n")

    #LN Import the engine that runs the web server
    import uvicorn

    #LN Tell the operator where the server listens
    logger.info("Starting server on port %d ...", args.port)
    #LN Start the server so it can be accessed from any computer on the chosen port
    uvicorn.run(app, host="0.0.0.0", port=args.port)


#LN Check if this file is running directly (not imported)
if __name__ == "__main__":
    main()
