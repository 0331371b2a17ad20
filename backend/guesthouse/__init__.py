"""
guesthouse - 床位预订与库存一致性服务
"""
