from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator
from typing import List, Optional


class UserDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    created_at: Optional[str] = None     # defaults to now
    secret_key: Optional[str] = None     # defaults to 32 random bytes, hex


class CreateWalletRequest(BaseModel):
    userDetails: UserDetails
    useStandardMnemonic: bool = False


class Wallet(BaseModel):
    address: str
    publicKey: str          # base64
    privateKey: str         # hex seed; custodial, returned to the caller (not safe for prod)
    privateKeyBase64: str
    mnemonic: str
    mnemonicKind: str       # "display" is NOT recoverable, "bip39" is


class CreateWalletResponse(BaseModel):
    success: bool
    wallet: Wallet
    message: str


class WalletCredentials(BaseModel):
    mnemonic: Optional[str] = None
    privateKey: Optional[str] = None


class SubmitForVettingRequest(BaseModel):
    walletCredentials: Optional[WalletCredentials] = None


class ApplicantRequest(BaseModel):
    applicantAddress: str = Field(..., min_length=1)


class VettingTransactionResponse(BaseModel):
    success: bool
    transactionDigest: Optional[str]
    applicantAddress: str
    message: str


class VettingStatusResponse(BaseModel):
    applicantAddress: str
    hasApplied: bool
    isApproved: Optional[bool]
    message: str
    queryFailed: bool = False
    error: Optional[str] = None


class CreateSupplyRequest(BaseModel):
    supplyLimit: StrictInt = Field(..., gt=0)
    tokenTypeName: str = Field(..., min_length=1)   # BRAAV1 or <pkg>::xoa::BRAAV1


class MintRequest(BaseModel):
    packageId: str = Field(..., min_length=1)
    supplyCapId: str = Field(..., min_length=1)
    lineageId: str = Field(..., min_length=1)
    counterId: str = Field(..., min_length=1)
    recipientAddress: str = Field(..., min_length=1)
    nftName: str = Field(..., min_length=1)
    badgeCoinId: str = Field(..., min_length=1)
    nftVersion: Optional[str] = None      # defaults to BRAAV16


class MintRestrictedRequest(MintRequest):
    creatorCapId: str = Field(..., min_length=1)
    coinId: str = Field(..., min_length=1)
    braavVersion: str = Field(..., min_length=1)


class EditNftRequest(BaseModel):
    nftObjectId: str = Field(..., min_length=1)
    newName: str = Field(..., min_length=1)
    newCoinId: str = Field(..., min_length=1)
    braavVersion: str = Field(..., min_length=1)


class DisplayRequest(BaseModel):
    displayKeys: List[str] = Field(..., min_length=1)
    displayValues: List[str] = Field(..., min_length=1)
    braavVersion: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def same_length(self):
        if len(self.displayKeys) != len(self.displayValues):
            raise ValueError("displayKeys and displayValues must have the same length")
        return self
