from pydantic import BaseModel, ConfigDict, Field


class SolPrice(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float = Field(description="Current SOL price in USD")
    change24h: float = Field(default=0.0, description="24h price change percentage")
    volume24h: float = Field(default=0.0, description="24h trading volume in USD")
    marketCap: float = Field(default=0.0, description="Market capitalization in USD")


class WalletBalance(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = Field(description="Wallet address")
    balance: float = Field(description="SOL balance")
    lamports: int = Field(description="Balance in lamports")
