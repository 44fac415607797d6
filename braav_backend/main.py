import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import nfts, supply, vetting, wallets
from .chain import SuiGateway, create_gateway
from .config import Settings
from .errors import BraavError, ConfigurationError
from .models import (
    ApplicantRequest,
    CreateSupplyRequest,
    CreateWalletRequest,
    CreateWalletResponse,
    DisplayRequest,
    EditNftRequest,
    MintRequest,
    MintRestrictedRequest,
    SubmitForVettingRequest,
    VettingStatusResponse,
    VettingTransactionResponse,
)
from .utils import timestamp

logger = logging.getLogger(__name__)

app = FastAPI(title="BRAAV Sui Vetting API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def _default_gateway() -> SuiGateway:
    return create_gateway(get_settings())


def get_gateway() -> SuiGateway:
    return _default_gateway()


ENDPOINTS = [
    {"method": "GET", "path": "/health", "description": "Health check endpoint"},
    {
        "method": "POST",
        "path": "/api/create-wallet",
        "description": "Create a custodial wallet",
        "body": {
            "userDetails": {"id": "string (required)", "created_at": "string", "secret_key": "string"},
            "useStandardMnemonic": "boolean (optional)",
        },
    },
    {
        "method": "POST",
        "path": "/api/submit-for-vetting",
        "description": "Submit an address for vetting",
        "body": {"walletCredentials": {"mnemonic": "string (optional)", "privateKey": "string (optional)"}},
    },
    {
        "method": "POST",
        "path": "/api/approve-vetting",
        "description": "Approve a vetting application",
        "body": {"applicantAddress": "string (required)"},
    },
    {
        "method": "POST",
        "path": "/api/status-of-vetting",
        "description": "Check vetting status of an address",
        "body": {"applicantAddress": "string (required)"},
    },
    {"method": "POST", "path": "/api/initialize-vetting-table", "description": "Initialize a new vetting table"},
    {
        "method": "POST",
        "path": "/api/create-supply",
        "description": "Create a new supply for a token type",
        "body": {"supplyLimit": "number (required)", "tokenTypeName": "string (required)"},
    },
    {
        "method": "POST",
        "path": "/api/mint-nft",
        "description": "Mint and transfer NFT to recipient",
        "body": {
            "packageId": "string (required)",
            "supplyCapId": "string (required)",
            "lineageId": "string (required)",
            "counterId": "string (required)",
            "recipientAddress": "string (required)",
            "nftName": "string (required)",
            "badgeCoinId": "string (required)",
            "nftVersion": "string (optional, default: BRAAV16)",
        },
    },
    {
        "method": "POST",
        "path": "/api/mint-restricted-nft",
        "description": "Mint and transfer a restricted NFT to recipient",
        "body": {
            "packageId": "string (required)",
            "supplyCapId": "string (required)",
            "lineageId": "string (required)",
            "counterId": "string (required)",
            "recipientAddress": "string (required)",
            "nftName": "string (required)",
            "badgeCoinId": "string (required)",
            "creatorCapId": "string (required)",
            "coinId": "string (required)",
            "braavVersion": "string (required)",
        },
    },
    {
        "method": "POST",
        "path": "/api/edit-nft",
        "description": "Update the name and coin id of an NFT",
        "body": {
            "nftObjectId": "string (required)",
            "newName": "string (required)",
            "newCoinId": "string (required)",
            "braavVersion": "string (required)",
        },
    },
    {
        "method": "POST",
        "path": "/api/edit-restricted-nft",
        "description": "Update the name and coin id of a restricted NFT",
        "body": {
            "nftObjectId": "string (required)",
            "newName": "string (required)",
            "newCoinId": "string (required)",
            "braavVersion": "string (required)",
        },
    },
    {
        "method": "POST",
        "path": "/api/create-display",
        "description": "Create the Display object for NFTs",
        "body": {
            "displayKeys": "string[] (required)",
            "displayValues": "string[] (required, same length as displayKeys)",
            "braavVersion": "string (required)",
        },
    },
    {
        "method": "POST",
        "path": "/api/create-restricted-display",
        "description": "Create the Display object for restricted NFTs",
        "body": {
            "displayKeys": "string[] (required)",
            "displayValues": "string[] (required, same length as displayKeys)",
            "braavVersion": "string (required)",
        },
    },
    {"method": "GET", "path": "/api/endpoints", "description": "Get list of all available endpoints"},
]


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    missing, invalid = [], []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        name = ".".join(loc) or "body"
        (missing if error.get("type") == "missing" else invalid).append(name)

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Missing required fields" if missing else "Invalid request fields",
            "missingFields": missing,
            "invalidFields": invalid,
            "endpoint": request.url.path,
        },
    )


@app.exception_handler(BraavError)
async def braav_error_handler(request: Request, exc: BraavError):
    if exc.status_code >= 500:
        logger.error("%s failed: %s", request.url.path, exc)
    content = {
        "success": False,
        "error": str(exc),
        "errorType": type(exc).__name__,
        "endpoint": request.url.path,
        "timestamp": timestamp(),
    }
    if isinstance(exc, ConfigurationError) and exc.fields:
        content["missingFields"] = exc.fields
    digest = getattr(exc, "digest", None)
    if digest:
        content["transactionDigest"] = digest
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("%s failed", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc),
            "errorType": type(exc).__name__,
            "endpoint": request.url.path,
            "timestamp": timestamp(),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"error": "Endpoint not found", "availableEndpoints": "/api/endpoints"},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.get("/health")
def health():
    return {
        "status": "OK",
        "message": "Sui Vetting API Server is running",
        "timestamp": timestamp(),
    }


@app.get("/api/endpoints")
def endpoints():
    return {"endpoints": ENDPOINTS}


@app.post("/api/create-wallet", response_model=CreateWalletResponse)
def create_wallet(body: CreateWalletRequest, settings: Settings = Depends(get_settings)):
    """Derives a custodial wallet from the user's details, or a random BIP-39 one."""
    if body.useStandardMnemonic:
        wallet = wallets.create_standard_wallet()
    else:
        details = wallets.complete_user_details(body.userDetails.model_dump())
        wallet = wallets.derive_custodial_wallet(
            details["id"], details["created_at"], details["secret_key"], settings.wallet_secret
        )
    return {
        "success": True,
        "wallet": wallet.to_dict(),
        "message": "Custodial wallet created successfully",
    }


@app.post("/api/submit-for-vetting", response_model=VettingTransactionResponse)
def submit_for_vetting(
    body: Optional[SubmitForVettingRequest] = None,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    credentials = None
    if body and body.walletCredentials:
        credentials = body.walletCredentials.model_dump(exclude_none=True)
    return vetting.submit_for_vetting(settings, gateway, credentials)


@app.post("/api/approve-vetting", response_model=VettingTransactionResponse)
def approve_vetting(
    body: ApplicantRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    return vetting.approve_vetting(settings, gateway, body.applicantAddress)


@app.post("/api/status-of-vetting", response_model=VettingStatusResponse)
def status_of_vetting(
    body: ApplicantRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    return vetting.status_of_vetting(settings, gateway, body.applicantAddress).to_dict()


@app.post("/api/initialize-vetting-table")
def initialize_vetting_table(settings: Settings = Depends(get_settings), gateway: SuiGateway = Depends(get_gateway)):
    table_id = vetting.initialize_vetting_table(settings, gateway)
    return {"success": True, "vettingTableId": table_id}


@app.post("/api/create-supply")
def create_supply(
    body: CreateSupplyRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    result = supply.create_supply(settings, gateway, body.supplyLimit, body.tokenTypeName)
    return {"success": True, "message": "Supply created successfully", "result": result}


@app.post("/api/mint-nft")
def mint_nft(
    body: MintRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    logger.info("Received minting request: %s -> %s", body.nftName, body.recipientAddress)
    data = nfts.mint_nft(settings, gateway, body.model_dump())
    logger.info("NFT minted: %s (%s)", data["nftObjectId"], data["transactionDigest"])
    return {
        "success": True,
        "message": "NFT minted and transferred successfully",
        "data": data,
        "timestamp": timestamp(),
    }


@app.post("/api/mint-restricted-nft")
def mint_restricted_nft(
    body: MintRestrictedRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    logger.info("Received restricted minting request: %s -> %s", body.nftName, body.recipientAddress)
    data = nfts.mint_nft(settings, gateway, body.model_dump(), restricted=True)
    return {
        "success": True,
        "message": "Restricted NFT minted and transferred successfully",
        "data": data,
        "timestamp": timestamp(),
    }


@app.post("/api/edit-nft")
def edit_nft(body: EditNftRequest, settings: Settings = Depends(get_settings), gateway: SuiGateway = Depends(get_gateway)):
    data = nfts.edit_nft(settings, gateway, body.nftObjectId, body.newName, body.newCoinId, body.braavVersion)
    return {"success": True, "data": data}


@app.post("/api/edit-restricted-nft")
def edit_restricted_nft(
    body: EditNftRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    data = nfts.edit_nft(
        settings, gateway, body.nftObjectId, body.newName, body.newCoinId, body.braavVersion, restricted=True
    )
    return {"success": True, "data": data}


@app.post("/api/create-display")
def create_display(body: DisplayRequest, settings: Settings = Depends(get_settings), gateway: SuiGateway = Depends(get_gateway)):
    data = nfts.create_display(settings, gateway, body.displayKeys, body.displayValues, body.braavVersion)
    return {"success": True, "data": data}


@app.post("/api/create-restricted-display")
def create_restricted_display(
    body: DisplayRequest,
    settings: Settings = Depends(get_settings),
    gateway: SuiGateway = Depends(get_gateway),
):
    data = nfts.create_display(
        settings, gateway, body.displayKeys, body.displayValues, body.braavVersion, restricted=True
    )
    return {"success": True, "data": data}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
